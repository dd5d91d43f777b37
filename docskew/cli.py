"""Command-line interface for skew detection and correction.

Provides a ``detect`` subcommand that prints estimator diagnostics as JSON
and a ``correct`` subcommand that writes the upright image next to the
diagnostics.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from docskew.estimators.fusion import NO_METHOD
from docskew.rotation.detector import RotationDetector
from docskew.utils.config import DetectionMethod, load_config
from docskew.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def _options_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Collect the option overrides given on the command line.

    Args:
        args: Parsed arguments.

    Returns:
        Mapping of option names to values, only for flags actually passed.
    """
    overrides: dict[str, Any] = {}
    if args.no_blur:
        overrides["enable_gaussian_blur"] = False
    if args.no_binarize:
        overrides["enable_binarization"] = False
    if args.threshold is not None:
        overrides["threshold_value"] = args.threshold
    if args.blur_radius is not None:
        overrides["blur_radius"] = args.blur_radius
    if args.methods is not None:
        overrides["detection_methods"] = args.methods
    return overrides


def _default_output(path: Path) -> Path:
    return path.with_name(f"{path.stem}_corrected{path.suffix}")


def detect_file(
    file_path: Path, detector: RotationDetector, overrides: dict[str, Any]
) -> dict[str, object]:
    """Estimate the skew of one image file.

    Args:
        file_path: Image to analyse.
        detector: Configured rotation detector.
        overrides: Per-call option overrides.

    Returns:
        Dictionary with the selected angle and every estimator candidate.
    """
    best, candidates = detector.detect_rotation(file_path.read_bytes(), overrides)
    return {
        "filename": file_path.name,
        "angle": best.angle if best else 0.0,
        "confidence": round(best.confidence, 4) if best else 0.0,
        "method": str(best.method) if best else NO_METHOD,
        "candidates": [
            {
                "method": str(c.method),
                "angle": c.angle,
                "confidence": round(c.confidence, 4),
            }
            for c in candidates
        ],
    }


def correct_file(
    file_path: Path,
    output_path: Path,
    detector: RotationDetector,
    overrides: dict[str, Any],
) -> dict[str, object]:
    """Correct the skew of one image file and write the result.

    Args:
        file_path: Image to correct.
        output_path: Destination for the corrected image.
        detector: Configured rotation detector.
        overrides: Per-call option overrides.

    Returns:
        Diagnostics of the correction, including the output path.

    Raises:
        ValueError: If the image could not be corrected; nothing is written.
    """
    result = detector.detect_and_correct_rotation(file_path.read_bytes(), overrides)
    if result.error is not None:
        raise ValueError(result.error)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.corrected_image)
    logger.info("Corrected image written to %s", output_path)

    summary: dict[str, object] = {"filename": file_path.name}
    summary.update(result.summary())
    summary["output"] = str(output_path)
    return summary


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", type=Path, help="Image file to process")
    parser.add_argument(
        "--methods",
        nargs="*",
        choices=[m.value for m in DetectionMethod],
        help="Detection methods to run (default: from config)",
    )
    parser.add_argument(
        "--threshold", type=int, help="Binarization threshold, 0-255"
    )
    parser.add_argument("--blur-radius", type=int, help="Gaussian blur radius")
    parser.add_argument(
        "--no-blur", action="store_true", help="Disable Gaussian blur"
    )
    parser.add_argument(
        "--no-binarize", action="store_true", help="Disable binarization"
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Document skew detection and correction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    detect_parser = subparsers.add_parser("detect", help="Estimate skew only")
    _add_common_arguments(detect_parser)

    correct_parser = subparsers.add_parser(
        "correct", help="Estimate skew and write the corrected image"
    )
    _add_common_arguments(correct_parser)
    correct_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output image (default: <name>_corrected.<ext>)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = load_config(args.config)
    setup_logging(args.log_level or config.log_level, stream=sys.stderr)

    if not args.file.exists():
        print(f"Error: {args.file} does not exist", file=sys.stderr)
        sys.exit(1)

    detector = RotationDetector(config.rotation)
    overrides = _options_from_args(args)

    try:
        if args.command == "detect":
            result = detect_file(args.file, detector, overrides)
        else:
            output = args.output or _default_output(args.file)
            result = correct_file(args.file, output, detector, overrides)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
