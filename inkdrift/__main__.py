"""Entry point for ``python -m inkdrift``.

Loads the YAML config, builds a simulation engine, and either opens a
Pygame window or renders a fixed number of frames to PNG files.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from inkdrift.simulation.config import SimulationConfig
from inkdrift.simulation.engine import SimulationEngine

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)

logger = logging.getLogger(__name__)


def _positive_int(text: str) -> int:
    """Parse a whole number of at least 1 for argparse."""
    value = int(text)
    if value < 1:
        msg = f"must be at least 1, got {value}"
        raise argparse.ArgumentTypeError(msg)
    return value


def build_parser() -> argparse.ArgumentParser:
    """Return the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="inkdrift",
        description="inkdrift - wandering balls leaving diffusing ink trails",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=60,
        help="Target frames per second (default: 60)",
    )
    parser.add_argument(
        "--ticks-per-frame",
        type=_positive_int,
        default=1,
        help="Simulation ticks per displayed frame (default: 1)",
    )
    parser.add_argument(
        "--capture-dir",
        type=pathlib.Path,
        default=None,
        help="Save every displayed frame as NNNN.png in this directory",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Render frames to PNG without opening a window",
    )
    parser.add_argument(
        "--frames",
        type=_positive_int,
        default=300,
        help="Frames to render in headless mode (default: 300)",
    )
    parser.add_argument(
        "--output-dir",
        type=pathlib.Path,
        default=pathlib.Path("frames"),
        help="Headless output directory (default: ./frames)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return parser


def load_config(path: pathlib.Path) -> SimulationConfig:
    """Load ``path``, falling back to defaults if the bundled file is absent."""
    if path == _DEFAULT_CONFIG and not path.exists():
        logger.info("no %s found, using built-in defaults", path)
        return SimulationConfig()
    return SimulationConfig.from_yaml(path)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI args, create engine, launch renderer or exporter."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    engine = SimulationEngine(config=config)

    if args.headless:
        from inkdrift.ui.export import export_frames

        export_frames(engine, args.frames, args.output_dir)
        return

    from inkdrift.ui.pygame_client import PygameRenderer

    renderer = PygameRenderer(
        engine=engine,
        ticks_per_frame=args.ticks_per_frame,
        capture_dir=args.capture_dir,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
