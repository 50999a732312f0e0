"""
Single entry point for the transmission preview.

Usage:
    uv run mjpython main.py                    # Interactive viewer (default)
    uv run mjpython main.py view [--no-taa]    # Same, with options
    uv run python main.py describe             # Print the composed scene
    uv run python main.py snapshot [--hold rotate_right --seconds 1.0] [--out PATH]

Requires mjpython (not plain python) for the viewer on macOS.
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from pathlib import Path

from config import ControllerConfig, DisplayConfig, InputConfig, ViewerConfig
from scene_view.frame import Action
from scene_view.scene import SceneConfigError

log = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False) -> None:
    """Configure the root logger and install an excepthook.

    Unhandled exceptions are logged before the default hook prints them.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(handler)

    # Capture unhandled exceptions to the log (once per process)
    if getattr(sys.excepthook, "logs_unhandled", False):
        return
    _original_excepthook = sys.excepthook

    def _logging_excepthook(exc_type, exc_value, exc_tb):
        if not issubclass(exc_type, KeyboardInterrupt):
            logging.critical(
                "Unhandled exception", exc_info=(exc_type, exc_value, exc_tb)
            )
        _original_excepthook(exc_type, exc_value, exc_tb)

    _logging_excepthook.logs_unhandled = True
    sys.excepthook = _logging_excepthook


def _is_mjpython() -> bool:
    """Check if we're running under mjpython."""
    return "MJPYTHON_BIN" in os.environ


def _check_mjpython():
    """Warn if not launched via mjpython (needed for MuJoCo viewer on macOS)."""
    if shutil.which("mjpython") is None:
        return  # mjpython not installed, nothing to check
    if not _is_mjpython():
        print(
            "Warning: the viewer should be launched with mjpython.\n"
            "  Use: uv run mjpython main.py view\n"
        )


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="main.py",
        description="Transmission preview - orbit a camera around a glass panel scene",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # shared controller/display options
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--no-taa", action="store_true", help="Disable temporal anti-aliasing")
    common.add_argument("--yaw-speed", type=float, default=1.0, help="Orbit speed, rad/s (default: 1.0)")
    common.add_argument("--dolly-speed", type=float, default=1.0, help="Dolly speed, e-folds/s (default: 1.0)")

    # view
    p_view = sub.add_parser("view", parents=[common], help="Launch interactive viewer")
    p_view.add_argument("--fps", type=float, default=60.0, help="Frame rate cap (default: 60)")
    p_view.add_argument(
        "--hold-window",
        type=float,
        default=0.7,
        help="Seconds a key counts as held after its last repeat (default: 0.7)",
    )

    # describe
    p_desc = sub.add_parser("describe", parents=[common], help="Print the composed scene")
    p_desc.add_argument("--flat-config", action="store_true", help="Also print the resolved config")

    # snapshot
    p_snap = sub.add_parser("snapshot", parents=[common], help="Render the camera view to PNG")
    p_snap.add_argument("--out", type=str, default="snapshot.png", help="Output PNG path")
    p_snap.add_argument(
        "--hold",
        action="append",
        default=[],
        choices=[a.value for a in Action],
        help="Logical key to hold before rendering (repeatable)",
    )
    p_snap.add_argument("--seconds", type=float, default=0.0, help="How long to hold the keys")
    p_snap.add_argument("--width", type=int, default=640, help="Image width (max 640)")
    p_snap.add_argument("--height", type=int, default=480, help="Image height (max 480)")

    return parser


def _config_from_args(args) -> ViewerConfig:
    """Resolve CLI flags into a ViewerConfig (raises ValueError on bad values)."""
    # Offscreen snapshots start from the headless preset
    base = ViewerConfig.for_headless() if args.command == "snapshot" else ViewerConfig()
    display = {"allow_taa": base.display.allow_taa and not args.no_taa}
    if getattr(args, "fps", None) is not None:
        display["target_fps"] = args.fps
    if getattr(args, "width", None) is not None:
        display["snapshot_width"] = args.width
        display["snapshot_height"] = args.height
    input_cfg = {}
    if getattr(args, "hold_window", None) is not None:
        input_cfg["hold_window"] = args.hold_window
    return ViewerConfig(
        controller=ControllerConfig(
            yaw_speed=args.yaw_speed,
            dolly_speed=args.dolly_speed,
        ),
        input=InputConfig(**input_cfg),
        display=DisplayConfig(**display),
    )


def _run_describe(config: ViewerConfig, flat_config: bool = False):
    from scene_view import Capabilities, compose_scene, describe_scene

    scene = compose_scene(Capabilities.detect(allow_taa=config.display.allow_taa))
    print(describe_scene(scene))
    if flat_config:
        for key, value in config.to_flat_dict().items():
            print(f"  {key} = {value}")


def _run_snapshot(config: ViewerConfig, out: str, hold: list[str], seconds: float):
    from scene_view.snapshot import drive, render_snapshot
    from view import build_session

    mj_scene, controller, _latch, _clock = build_session(config)
    held = tuple(Action(name) for name in hold)
    if held and seconds > 0:
        frames = drive(controller, held, seconds, step=config.display.snapshot_step)
        mj_scene.sync_camera(controller.camera)
        log.info(
            "Held %s for %d frames, camera distance %.2f",
            ", ".join(a.value for a in held),
            frames,
            controller.camera.distance,
        )
    path = render_snapshot(
        mj_scene,
        Path(out),
        width=config.display.snapshot_width,
        height=config.display.snapshot_height,
    )
    print(f"  -> {path}")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command is None:
        # No subcommand -> viewer with defaults
        args = parser.parse_args([*argv, "view"])

    try:
        config = _config_from_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        if args.command == "view":
            _check_mjpython()
            from view import run_view

            run_view(config)

        elif args.command == "describe":
            _run_describe(config, flat_config=args.flat_config)

        elif args.command == "snapshot":
            _run_snapshot(config, args.out, args.hold, args.seconds)

    except SceneConfigError as e:
        log.error("Scene configuration error: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
