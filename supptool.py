import argparse
import logging
import os
import re
import sys

from vgsupp.errors import SuppressionParseError
from vgsupp.model import Suppressions
from vgsupp.parser import SuppressionParser
from vgsupp.renderers import renderer_registry

logger = logging.getLogger("supptool")


def _require_files(files) -> None:
    for path in files:
        if not os.path.isfile(path):
            sys.exit(f"Error: File not found: {path}")


def cmd_check(args: argparse.Namespace) -> int:
    """Parse each file and report how many suppressions it defines.

    Every file is checked even after a failure; the exit status is 1
    if any of them did not parse.
    """
    _require_files(args.files)

    parser = SuppressionParser()
    rc = 0
    for path in args.files:
        try:
            suppressions = parser.parse_file(path)
        except SuppressionParseError as exc:
            print(str(exc), file=sys.stderr)
            rc = 1
            continue
        except OSError as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            rc = 1
            continue
        print(f"{path}: {len(suppressions)} suppressions")
    return rc


def cmd_print(args: argparse.Namespace) -> int:
    """Merge the suppressions of all files and print them in the selected format.

    ``--tool`` keeps only suppressions for that tool and ``--exclude``
    drops suppressions whose name matches the regex.
    """
    _require_files(args.files)

    exclude_re = None
    if args.exclude:
        try:
            exclude_re = re.compile(args.exclude)
        except re.error as e:
            sys.exit(f"Error: Invalid regex for --exclude: {e}")

    parser = SuppressionParser()
    merged = Suppressions()
    for path in args.files:
        try:
            merged.append_all(parser.parse_file(path))
        except SuppressionParseError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        except OSError as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            return 1

    selected = [
        supp
        for supp in merged
        if (args.tool is None or supp.kind.tool_name == args.tool)
        and (exclude_re is None or not exclude_re.search(supp.name))
    ]
    logger.debug("printing %d of %d suppressions", len(selected), len(merged))

    renderer = renderer_registry.create(args.format)
    output = renderer.render_suppressions(selected)
    # The canonical format already ends each block with a newline
    print(output, end="" if output.endswith("\n") else "\n")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="supptool.py",
        description="Facade for Valgrind suppression file utilities.",
    )

    # Global options
    parser.add_argument(
        "--format",
        choices=renderer_registry.keys(),
        default="valgrind",
        help="Output format (default: valgrind).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    subparsers = parser.add_subparsers(dest="command")

    # check subcommand
    check = subparsers.add_parser(
        "check",
        help="Validate suppression files.",
    )
    check.add_argument(
        "files",
        metavar="FILE",
        nargs="+",
        help="Suppression file to validate.",
    )
    check.set_defaults(func=cmd_check)

    # print subcommand
    print_cmd = subparsers.add_parser(
        "print",
        help="Merge suppression files and print them.",
    )
    print_cmd.add_argument(
        "files",
        metavar="FILE",
        nargs="+",
        help="Suppression file to read; files are merged in order.",
    )
    print_cmd.add_argument(
        "--tool",
        default=None,
        help="Only keep suppressions for this tool (e.g. Memcheck).",
    )
    print_cmd.add_argument(
        "--exclude",
        metavar="REGEX",
        default=None,
        help="Drop suppressions whose name matches REGEX.",
    )
    print_cmd.set_defaults(func=cmd_print)

    return parser


def main(argv=None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
