"""Platform rendering capabilities, checked once at startup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

log = logging.getLogger(__name__)

# MUJOCO_GL values that select a software rasterizer
_SOFTWARE_GL_BACKENDS = ("osmesa",)


@dataclass(frozen=True)
class Capabilities:
    """Optional post-effects the current platform can run."""

    temporal_aa: bool = True

    @classmethod
    def detect(cls, allow_taa: bool = True) -> Capabilities:
        """Probe the environment.

        Temporal anti-aliasing is disabled on software GL backends and when
        the caller opts out.  Neither case is an error.
        """
        gl_backend = os.environ.get("MUJOCO_GL", "").lower()
        temporal_aa = allow_taa
        if gl_backend in _SOFTWARE_GL_BACKENDS:
            log.info("GL backend %r: temporal anti-aliasing unavailable", gl_backend)
            temporal_aa = False
        elif not allow_taa:
            log.info("Temporal anti-aliasing disabled by configuration")
        return cls(temporal_aa=temporal_aa)
