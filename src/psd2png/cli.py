import argparse
import logging
import sys
from pprint import pprint
from typing import Optional

from psd2png.batch import BatchOrchestrator
from psd2png.errors import BatchError
from psd2png.options import ConversionOptions
from psd2png.progress import LoggingSink
from psd2png.psd import PSD
from psd2png.version import __version__

logger = logging.getLogger("psd2png")

EXIT_OK = 0
EXIT_FAILED_FILES = 1
EXIT_BATCH_ERROR = 2


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="psd2png",
        description="Convert a directory tree of PSD files into flattened PNG files.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only show problems.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser(
        "convert", help="Convert every PSD file below INPUT_DIR into OUTPUT_DIR"
    )
    convert_parser.add_argument("input_dir", help="Input directory")
    convert_parser.add_argument("output_dir", help="Output directory")
    convert_parser.add_argument(
        "-j",
        "--workers",
        type=int,
        default=1,
        help="Number of files converted concurrently (default: 1).",
    )
    convert_parser.add_argument(
        "-e",
        "--extension",
        action="append",
        dest="extensions",
        metavar="EXT",
        help="Source extension to convert, repeatable (default: .psd and .psb).",
    )
    convert_parser.add_argument(
        "--compress-level",
        type=int,
        default=6,
        choices=range(10),
        metavar="0-9",
        help="PNG compression level (default: 6).",
    )
    convert_parser.add_argument(
        "--apply-icc",
        action="store_true",
        help="Convert documents with an embedded ICC profile to sRGB.",
    )

    show_parser = subparsers.add_parser("show", help="Show the file structure")
    show_parser.add_argument("input_file", help="Input PSD file")

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    if args.verbose:
        logger.setLevel(logging.DEBUG)
    elif args.quiet:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.INFO)

    if args.command == "show":
        with open(args.input_file, "rb") as f:
            pprint(PSD.read(f))
        return EXIT_OK

    kwargs = {}
    if args.extensions:
        kwargs["extensions"] = tuple(args.extensions)
    try:
        options = ConversionOptions(
            workers=args.workers,
            compress_level=args.compress_level,
            apply_icc=args.apply_icc,
            **kwargs,
        )
    except ValueError as e:
        logger.error(str(e))
        return EXIT_BATCH_ERROR

    orchestrator = BatchOrchestrator(LoggingSink(logger), options)
    try:
        result = orchestrator.start_conversion(args.input_dir, args.output_dir)
    except BatchError:
        # Already logged by the orchestrator.
        return EXIT_BATCH_ERROR
    except KeyboardInterrupt:
        orchestrator.cancel()
        logger.error("Interrupted")
        return EXIT_BATCH_ERROR

    return EXIT_OK if result.ok else EXIT_FAILED_FILES


if __name__ == "__main__":
    sys.exit(main())
