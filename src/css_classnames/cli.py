# src/css_classnames/cli.py
import sys
import argparse
from pathlib import Path
from typing import List, Optional

# Module imports
from css_classnames.core.extractor import ClassNameExtractor
from css_classnames.errors import ProcessingError, UsageError

PROG = "css-classnames"


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog=PROG,
        usage=f"{PROG} [options] <input.css> <output.txt>",
        description="Extract the class names exported by a CSS/SCSS module into a sorted, comma-separated list.",
    )
    parser.add_argument("input", type=str, nargs="?", help="CSS or SCSS module to read")
    parser.add_argument("output", type=str, nargs="?", help="Text file to write (created or overwritten)")

    parser.add_argument(
        "-I", "--load-path",
        action="append",
        default=[],
        metavar="DIR",
        help="Extra directory to search for @import targets (repeatable)",
    )
    parser.add_argument(
        "-x", "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="gitignore-style pattern; matching @import targets are not inlined (repeatable)",
    )
    parser.add_argument("--no-globals", action="store_true", help="Do not export :global class names")
    parser.add_argument(
        "--all-exports",
        action="store_true",
        help="Also export ids, keyframes, @value names and :export keys (the full CSS modules token map)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Report progress on stderr")
    return parser


def parse_arguments(parser: argparse.ArgumentParser, argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses argv; a missing input or output path raises UsageError."""
    args = parser.parse_intermixed_args(argv)
    if not args.input or not args.output:
        raise UsageError(parser.format_usage().strip())
    return args


def main(argv: Optional[List[str]] = None):
    parser = create_arg_parser()
    try:
        # 1. Setup
        args = parse_arguments(parser, argv)

        input_path = Path(args.input)
        output_path = Path(args.output)

        extractor = ClassNameExtractor(
            load_paths=[Path(p) for p in args.load_path],
            exclude_patterns=args.exclude,
            export_globals=not args.no_globals,
            all_exports=args.all_exports,
        )

        # 2. Extraction & Output
        result = extractor.extract(input_path, output_path)

        if args.verbose:
            for source in result.sources:
                print(f"  > Read {source}", file=sys.stderr)
            print(f"Wrote {len(result.class_names)} class names to {output_path}", file=sys.stderr)

    except UsageError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    except (ProcessingError, OSError) as e:
        print(f"Error processing CSS: {e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
