#!/usr/bin/env python3
"""
IdPhotoCrop CLI - extract ID photos from the terminal.

Usage:
    python -m idphotocrop <command> [options]

Commands:
    extract     Full pipeline: orientation, detection, selection, crop, export
    orient      Test the four orientations and optionally save the corrected page
    detect      List ranked photo candidates
    rotate      Rotate an image by a multiple of 90 degrees

Examples:
    # Best candidate, auto orientation
    idphotocrop-cli extract scan.pdf -o photo.png

    # Second candidate, then turn the photo right
    idphotocrop-cli extract scan.jpg -o photo.png --candidate 1 --rotate 90

    # Manual selection in document pixels
    idphotocrop-cli extract scan.png -o photo.png --manual 420,80,300,380

    # Retry detection on up to three rotated copies when nothing is found
    idphotocrop-cli extract scan.png -o photo.png --retry-rotations 3
"""

import argparse
import logging
import sys
from pathlib import Path

from idphotocrop.config import APP_NAME, APP_VERSION, PDF_RENDER_SCALE
from idphotocrop.utils.config_manager import ConfigManager, get_config_manager
from idphotocrop.utils.exceptions import IdPhotoCropError, NoCandidatesError
from idphotocrop.utils.i18n import _

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_CANDIDATES = 2

# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _parse_numbers(text: str, count: int, label: str) -> list[float]:
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != count:
        raise ValueError(f"Invalid {label} '{text}'. Expected {count} comma-separated numbers.")
    try:
        return [float(p) for p in parts]
    except ValueError:
        raise ValueError(
            f"Invalid {label} '{text}'. Expected {count} comma-separated numbers."
        ) from None


def _parse_rect(text: str) -> tuple[float, float, float, float]:
    """Parse "x,y,w,h" into a tuple of floats."""
    x, y, w, h = _parse_numbers(text, 4, "rectangle")
    if w <= 0 or h <= 0:
        raise ValueError(f"Invalid rectangle '{text}'. Width and height must be positive.")
    return (x, y, w, h)


def _parse_point(text: str) -> tuple[float, float]:
    """Parse "x,y" into a tuple of floats."""
    x, y = _parse_numbers(text, 2, "point")
    return (x, y)


def _angle(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid angle: {text}") from None
    if value % 90 != 0:
        raise argparse.ArgumentTypeError(f"angle must be a multiple of 90: {text}")
    return value


# ---------------------------------------------------------------------------
# Argument parser construction
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with subcommands."""
    p = argparse.ArgumentParser(
        prog="idphotocrop-cli",
        description=_("Extract the portrait photo from a scanned identity document."),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-v", "--verbose", action="store_true", help=_("Verbose logging (DEBUG)"))
    p.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help=_("Settings file (default: ~/.config/idphotocrop/settings.json)"),
    )

    sub = p.add_subparsers(dest="command", help=_("Available commands"))

    # --- extract ---
    ex = sub.add_parser("extract", help=_("Extract the photo from a document"))
    ex.add_argument("input", type=Path, help=_("Input PDF or image"))
    ex.add_argument("-o", "--output", type=Path, default=None, help=_("Output image file"))
    ex.add_argument("--language", type=str, default=None, help=_("OCR language (default: eng)"))
    ex.add_argument(
        "--padding",
        type=float,
        default=None,
        help=_("Padding around a detected photo as a fraction of its size (default: 0.5)"),
    )
    ex.add_argument(
        "--no-orientation",
        action="store_true",
        default=False,
        help=_("Skip automatic orientation correction"),
    )
    ex.add_argument(
        "--retry-rotations",
        type=int,
        default=None,
        help=_("Rotate the page 90° left and retry when nothing is found (max 3)"),
    )
    ex.add_argument(
        "--rotate",
        type=_angle,
        action="append",
        default=[],
        choices=[-90, 90, 180],
        help=_("Rotate the extracted photo (-90, 90 or 180); repeatable"),
    )
    sel = ex.add_mutually_exclusive_group()
    sel.add_argument("--candidate", type=int, default=0, help=_("Candidate rank to crop"))
    sel.add_argument("--point", type=str, default=None, help=_("Select candidate under x,y"))
    sel.add_argument("--manual", type=str, default=None, help=_("Manual selection x,y,w,h"))

    # --- orient ---
    orient = sub.add_parser("orient", help=_("Test page orientation"))
    orient.add_argument("input", type=Path, help=_("Input PDF or image"))
    orient.add_argument("-o", "--output", type=Path, default=None, help=_("Save corrected page"))
    orient.add_argument("--language", type=str, default=None, help=_("OCR language"))

    # --- detect ---
    det = sub.add_parser("detect", help=_("List photo candidates"))
    det.add_argument("input", type=Path, help=_("Input PDF or image"))

    # --- rotate ---
    rot = sub.add_parser("rotate", help=_("Rotate an image"))
    rot.add_argument("input", type=Path, help=_("Input PDF or image"))
    rot.add_argument("-o", "--output", type=Path, required=True, help=_("Output image file"))
    rot.add_argument("--angle", type=_angle, required=True, help=_("Clockwise angle"))

    return p


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _make_machine(args, config, logger):
    from idphotocrop.services.backends import HaarCascadeDetector, RapidOCRRecognizer
    from idphotocrop.services.session import SelectionStateMachine

    language = args.language or config.get("ocr.language", "eng")
    padding = args.padding if args.padding is not None else config.get_padding_ratio()
    logger.debug(f"language={language}, padding={padding}")
    return SelectionStateMachine(
        RapidOCRRecognizer(),
        HaarCascadeDetector(),
        language=language,
        padding=padding,
        max_candidates=int(config.get("detection.max_candidates", 5)),
    )


def _output_path(args, config) -> Path:
    from idphotocrop.services.backends import default_export_name

    if args.output:
        return args.output
    folder = config.get("output.folder") or str(args.input.parent)
    prefix = config.get("output.filename_prefix", "extracted_photo_")
    return Path(folder) / default_export_name(prefix)


def _cmd_extract(args, config, logger) -> int:
    from idphotocrop.services.backends import PillowEncoder
    from idphotocrop.services.geometry import Rectangle

    retries = args.retry_rotations
    if retries is None:
        retries = int(config.get("detection.retry_rotations", 0))
    retries = max(0, min(3, retries))

    machine = _make_machine(args, config, logger)
    machine.load_file(args.input)
    auto = not args.no_orientation and bool(config.get("ocr.auto_orientation", True))
    state = machine.process(auto_orientation=auto)
    if state.orientation is not None and state.orientation.error is not None:
        print(f"Warning: {state.orientation.error}", file=sys.stderr)

    if args.manual:
        x, y, w, h = _parse_rect(args.manual)
        machine.select_manual(Rectangle(x, y, w, h))
    else:
        attempts = 0
        while not machine.state.has_candidates and attempts < retries:
            attempts += 1
            logger.info(f"Rotate & retry {attempts}/{retries}")
            machine.rotate_and_retry()

        if not machine.state.has_candidates:
            raise NoCandidatesError(machine.state.message)

        if args.point:
            px, py = _parse_point(args.point)
            if machine.select_point(px, py) is None:
                print(f"Error: no candidate at {px:.0f},{py:.0f}", file=sys.stderr)
                return EXIT_ERROR
        else:
            machine.select_candidate(args.candidate)

    for degrees in args.rotate:
        machine.rotate_photo(degrees)

    output = _output_path(args, config)
    fmt = output.suffix.lstrip(".").lower() or "png"
    machine.export(PillowEncoder(), output, format=fmt)
    photo = machine.state.photo
    print(f"{output} ({photo.width}x{photo.height}, rotation {machine.state.rotation}°)")
    return EXIT_OK


def _cmd_orient(args, config, logger) -> int:
    from idphotocrop.services.backends import PillowEncoder, RapidOCRRecognizer, load_document
    from idphotocrop.services.backends.encoder import write_export
    from idphotocrop.services.orientation import resolve_orientation

    image = load_document(args.input, scale=PDF_RENDER_SCALE)
    language = args.language or config.get("ocr.language", "eng")
    result = resolve_orientation(image, RapidOCRRecognizer(), language)

    if result.error is not None:
        print(f"Warning: {result.error}", file=sys.stderr)
    for i, t in enumerate(result.trials, 1):
        print(
            f"{i}. {t.name:<40} score={t.score:8.1f} words={t.good_word_count}/{t.word_count} "
            f"conf={t.avg_confidence:5.1f}%"
        )
    print(f"status={result.status.value} angle={result.angle}")

    if args.output:
        fmt = args.output.suffix.lstrip(".").lower() or "png"
        write_export(PillowEncoder().encode(result.image, fmt), args.output)
    return EXIT_OK


def _cmd_detect(args, _config, _logger) -> int:
    from idphotocrop.services.backends import HaarCascadeDetector, load_document
    from idphotocrop.services.detection import find_candidates

    image = load_document(args.input)
    candidates = find_candidates(image, HaarCascadeDetector())
    if not candidates:
        print(_("No faces detected."))
        return EXIT_NO_CANDIDATES
    for i, c in enumerate(candidates):
        r = c.rect
        print(
            f"{i}: x={r.x:.0f} y={r.y:.0f} w={r.width:.0f} h={r.height:.0f} "
            f"area={c.area:.0f} region={c.region_index}"
        )
    return EXIT_OK


def _cmd_rotate(args, _config, _logger) -> int:
    from idphotocrop.services.backends import PillowEncoder, load_document
    from idphotocrop.services.backends.encoder import write_export
    from idphotocrop.services.rotation import rotate

    image = load_document(args.input)
    fmt = args.output.suffix.lstrip(".").lower() or "png"
    write_export(PillowEncoder().encode(rotate(image, args.angle), fmt), args.output)
    return EXIT_OK


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )
    logger = logging.getLogger("idphotocrop.cli")

    if not args.input.exists():
        print(f"Error: {args.input} not found", file=sys.stderr)
        return EXIT_ERROR

    handlers = {
        "extract": _cmd_extract,
        "orient": _cmd_orient,
        "detect": _cmd_detect,
        "rotate": _cmd_rotate,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return EXIT_ERROR

    try:
        config = ConfigManager(args.config) if args.config else get_config_manager()
        return handler(args, config, logger)
    except NoCandidatesError as e:
        print(f"{e}", file=sys.stderr)
        return EXIT_NO_CANDIDATES
    except (IdPhotoCropError, IndexError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
