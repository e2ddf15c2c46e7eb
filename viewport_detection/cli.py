"""Command-line interface for viewport detection."""

import argparse
import logging
import math
import re
import sys
from pathlib import Path

DEFAULT_DELIM = "_"
NO_DETECTION_EXIT_CODE = 2


def write_error(output_path: str | None, message: str) -> None:
    """Write error message to error file for callers to read."""
    if output_path:
        error_path = output_path + ".err"
        with open(error_path, "w") as f:
            f.write(message)


def detect_delim(filename: str) -> str | None:
    """Detect delimiter from filename by finding most common separator."""
    stem = Path(filename).stem
    for delim in ["_", "-", "."]:
        if delim in stem:
            return delim
    return None


def build_output_filename(
    input_path: str, prefix: str, suffix: str, delim: str, extension: str = ".png"
) -> str:
    p = Path(input_path)
    parts = []
    if prefix:
        parts.append(prefix)
    parts.append(p.stem)
    if suffix:
        parts.append(suffix)
    return str(p.with_name(delim.join(parts) + extension))


def parse_click(value: str) -> tuple[int, int]:
    """Parse a click point such as "120,340".

    Separators: , : / ; x
    """
    parts = [p for p in re.split(r"[,:;/x]", value.strip()) if p]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"Invalid click point: {value!r} (expected X,Y)")
    try:
        return int(round(float(parts[0]))), int(round(float(parts[1])))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid click point: {value!r} (expected X,Y)")


def parse_rotation(value: str) -> float:
    try:
        degrees = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid rotation: {value!r}")
    if not math.isfinite(degrees):
        raise argparse.ArgumentTypeError(f"Rotation must be a finite angle, got {value!r}")
    return degrees


def parse_options_config(config_arg: str | None):
    """Parse analysis options from CLI argument.

    Args:
        config_arg: Either inline JSON string or path to .json file

    Returns:
        AnalysisOptions object or None if not provided
    """
    if not config_arg:
        return None

    from .models import AnalysisOptions

    config_path = Path(config_arg)
    if config_path.exists() and config_path.suffix == ".json":
        return AnalysisOptions.from_file(config_path)

    try:
        return AnalysisOptions.from_json(config_arg)
    except Exception as e:
        raise ValueError(f"Invalid --options: {e}")


def build_options(args: argparse.Namespace):
    """Combine --options with the individual flags; flags win."""
    from .models import AnalysisOptions, BackgroundColor

    options = parse_options_config(args.options) or AnalysisOptions()
    if args.background is not None:
        options.background_color = BackgroundColor(args.background)
    if args.min_area is not None:
        options.min_area_threshold = args.min_area
    if args.min_dimension is not None:
        options.min_dimension_threshold = args.min_dimension
    if args.tolerance is not None:
        options.tolerance = args.tolerance
    options.validate()
    return options


def build_preview_config(args: argparse.Namespace):
    from .models import PreviewConfig

    config = PreviewConfig(max_dimension=args.max_dim, image_format=args.format)
    config.validate()
    return config


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


def add_output_arguments(parser: argparse.ArgumentParser) -> None:
    """Add preview output arguments shared by detect and preview."""
    parser.add_argument("input", help="Input image file")
    parser.add_argument("-o", "--output", help="Output filename")
    parser.add_argument("--prefix", default="", help="Prefix for output filename")
    parser.add_argument("--suffix", default="preview", help="Suffix for output filename")
    parser.add_argument(
        "--delim",
        help="Delimiter between prefix/name/suffix (auto-detected from filename if not set)",
    )
    parser.add_argument(
        "--default-delim",
        default=DEFAULT_DELIM,
        help=f"Default delimiter if not detected (default: '{DEFAULT_DELIM}')",
    )
    parser.add_argument(
        "--rotation",
        type=parse_rotation,
        help="Straightening rotation in degrees applied to the frame before rendering",
    )
    parser.add_argument(
        "--max-dim",
        type=int,
        default=200,
        help="Longest side of the preview in pixels (default: 200)",
    )
    parser.add_argument(
        "--format",
        choices=[".png", ".jpg", ".jpeg"],
        default=".png",
        help="Preview encoding (default: .png)",
    )
    parser.add_argument(
        "--debug-dir",
        help="Directory to save debug visualization images",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def add_detect_arguments(parser: argparse.ArgumentParser) -> None:
    """Add frame detection arguments to a parser."""
    add_output_arguments(parser)
    parser.add_argument(
        "-c",
        "--click",
        required=True,
        type=parse_click,
        help="Click point in image pixels, e.g. 120,340",
    )
    parser.add_argument(
        "--background",
        choices=["white", "black", "auto"],
        help="Scanner background color (default: white)",
    )
    parser.add_argument(
        "--min-area",
        type=float,
        help="Minimum frame area in pixels (default: 2500)",
    )
    parser.add_argument(
        "--min-dimension",
        type=float,
        help="Minimum frame width/height in pixels (default: 30)",
    )
    parser.add_argument(
        "--tolerance",
        type=int,
        help="Background intensity tolerance 0-255 (default: 30)",
    )
    parser.add_argument(
        "--options",
        help="JSON analysis options (inline JSON string or path to .json file). "
        "Individual flags override values from this.",
    )
    parser.add_argument(
        "--coords",
        action="store_true",
        help="Output the detected frame as JSON instead of a preview image",
    )
    parser.add_argument(
        "--frame-out",
        help="Also save the detected frame as JSON to this file",
    )


def _output_path(args: argparse.Namespace) -> str:
    if args.output:
        return args.output
    delim = args.delim or detect_delim(args.input) or args.default_delim
    return build_output_filename(args.input, args.prefix, args.suffix, delim, args.format)


def _write_preview(args: argparse.Namespace, source, frame, visualizer) -> None:
    import cv2

    from .detection import render_preview

    try:
        config = build_preview_config(args)
    except ValueError as e:
        write_error(args.output, str(e))
        sys.exit(str(e))

    result = render_preview(source, frame, config, visualizer)
    if not result.success:
        write_error(args.output, result.error)
        sys.exit(result.error)

    cv2.imwrite(_output_path(args), result.image)


def run_detect(args: argparse.Namespace) -> None:
    """Detect the frame under a click and write its preview."""
    from .detection import detect_frame, load_image
    from .exceptions import ViewportDetectionError

    configure_logging(args.verbose)
    error_output = args.output if args.output else None

    visualizer = None
    if args.debug_dir:
        from .visualizer import DebugVisualizer

        visualizer = DebugVisualizer(args.debug_dir)

    try:
        options = build_options(args)
    except ValueError as e:
        write_error(error_output, str(e))
        sys.exit(str(e))

    click_x, click_y = args.click

    try:
        img = load_image(args.input)
        frame = detect_frame(img, click_x, click_y, options, visualizer=visualizer)
    except ViewportDetectionError as e:
        write_error(error_output, e.user_message)
        sys.exit(e.user_message)
    except Exception as e:
        msg = f"Unexpected error: {e}"
        write_error(error_output, msg)
        sys.exit(msg)

    if frame is None:
        msg = "No photo found at click point"
        write_error(error_output, msg)
        print(msg, file=sys.stderr)
        sys.exit(NO_DETECTION_EXIT_CODE)

    if args.rotation is not None:
        frame = frame.with_rotation(args.rotation)

    if args.frame_out:
        with open(args.frame_out, "w") as f:
            f.write(frame.to_json() + "\n")

    if args.coords:
        if args.output:
            with open(args.output, "w") as f:
                f.write(frame.to_json() + "\n")
        else:
            print(frame.to_json())
        return

    _write_preview(args, img, frame, visualizer)


def run_preview(args: argparse.Namespace) -> None:
    """Render a preview for a previously saved frame."""
    from .detection import load_image
    from .exceptions import ViewportDetectionError
    from .models import ViewportFrame

    configure_logging(args.verbose)
    error_output = args.output if args.output else None

    visualizer = None
    if args.debug_dir:
        from .visualizer import DebugVisualizer

        visualizer = DebugVisualizer(args.debug_dir)

    try:
        frame = ViewportFrame.from_file(args.frame)
    except (OSError, ValueError, KeyError) as e:
        msg = f"Invalid frame file {args.frame}: {e}"
        write_error(error_output, msg)
        sys.exit(msg)

    if args.rotation is not None:
        frame = frame.with_rotation(args.rotation)

    try:
        img = load_image(args.input)
    except ViewportDetectionError as e:
        write_error(error_output, e.user_message)
        sys.exit(e.user_message)

    if visualizer:
        visualizer.save_frame(img, frame)

    _write_preview(args, img, frame, visualizer)


def run_defaults(args: argparse.Namespace) -> None:
    """Print default analysis options as JSON."""
    from .models import AnalysisOptions

    print(AnalysisOptions.default_json())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Detect photos on scanned sheets and render straightened previews",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  viewport-detect detect scan.jpg --click 420,310               Detect and save preview
  viewport-detect detect scan.jpg -c 420,310 --coords           Print frame as JSON
  viewport-detect detect scan.jpg -c 420,310 --rotation -4.5    Straightened preview
  viewport-detect preview scan.jpg --frame frame.json --rotation 3
  viewport-detect defaults                                      Print default options
""",
    )
    subparsers = parser.add_subparsers(dest="command")

    detect_parser = subparsers.add_parser(
        "detect",
        help="Detect the photo under a click point and render its preview",
    )
    add_detect_arguments(detect_parser)
    detect_parser.set_defaults(func=run_detect)

    preview_parser = subparsers.add_parser(
        "preview",
        help="Render the preview of a saved frame",
    )
    add_output_arguments(preview_parser)
    preview_parser.add_argument("--frame", required=True, help="Frame JSON file")
    preview_parser.set_defaults(func=run_preview)

    defaults_parser = subparsers.add_parser(
        "defaults",
        help="Print default analysis options as JSON",
    )
    defaults_parser.set_defaults(func=run_defaults)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
