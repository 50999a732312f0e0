"""Fixed parameters of the transmission preview scene.

Every literal the composer uses lives here, so the scene can be read (and
tuned) in one place.  Angles are radians, distances meters, Y-up.
"""

from __future__ import annotations

import math

from scene_view.primitives import AQUAMARINE, GREEN, RED, WARM_WHITE, WHITE, Material
from scene_view.scene import ShadowFlags, WorldSettings

# ---------------------------------------------------------------------------
# World
# ---------------------------------------------------------------------------

WORLD = WorldSettings(
    clear_color=AQUAMARINE,
    ambient_brightness=0.0,
    shadow_map_size=2048,
    msaa_samples=4,
)

# MSAA is redundant (and conflicts) when temporal AA resolves edges
MSAA_SAMPLES_WITH_TAA = 0

# ---------------------------------------------------------------------------
# Sun
# ---------------------------------------------------------------------------

# Tilted off-axis so shadows fall at an angle across the floor
SUN_TILT_X = 1.9
SUN_TURN_Y = math.pi
SUN_COLOR = WARM_WHITE
SUN_ILLUMINANCE = 15000.0  # lux
SUN_DEPTH_BIAS = 0.02
SUN_NORMAL_BIAS = 0.6

# ---------------------------------------------------------------------------
# Surfaces
# ---------------------------------------------------------------------------

FLOOR_SIZE = 100.0
FLOOR_POS = (0.0, 0.5, -3.0)
FLOOR_MATERIAL = Material(base_color=GREEN)

CUBE_SIZE = 0.7
CUBE_POS = (0.25, 0.2, -2.0)
# Far from axis-aligned so every face catches light differently
CUBE_EULER_XYZ = (1.4, 3.7, 21.3)
CUBE_MATERIAL = Material(base_color=RED)

WINDOW_SIZE = (4.0, 4.0)
WINDOW_POS = (0.25, 1.0, -2.0)
WINDOW_EULER_XYZ = (math.pi * 1.5, 0.0, 0.0)
WINDOW_MATERIAL = Material(
    base_color=WHITE,
    diffuse_transmission=1.0,
    specular_transmission=1.0,
    thickness=1.0,
    ior=1.4,
    perceptual_roughness=0.0,
    reflectance=0.0,
)
# Thin transmissive geometry shadows itself badly
WINDOW_SHADOWS = ShadowFlags(cast=False, receive=False)

# ---------------------------------------------------------------------------
# Camera
# ---------------------------------------------------------------------------

CAMERA_NAME = "preview"
CAMERA_POS = (1.0, 2.5, 7.0)
CAMERA_TARGET = (0.0, 0.0, 0.0)
CAMERA_FOV_Y = 45.0  # degrees
CAMERA_HDR = True
CAMERA_EXPOSURE = -2.0  # EV
CAMERA_SATURATION = 1.2
CAMERA_TONEMAPPING = "tony_mc_mapface"
