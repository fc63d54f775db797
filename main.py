"""CLI entrypoint: identifiers in, formatted bibliography out."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from identifiers import classify_all, partition_identifiers
from models import ClassifiedIdentifier, FailureMarker, IdentifierType
from renderer import OUTPUT_FORMATS, RenderError, render_bibliography
from resolver import ResolveOptions, Resolver, ResolveResult
from user_config import (
    ConfigError,
    Settings,
    get_config_value,
    load_config,
    reset_config,
    resolve_settings,
    update_config,
)

__version__ = "1.2.0"

LOGGER = logging.getLogger(__name__)

_HELP_WORDS = frozenset({"help", "-h", "--help", "h", "-help"})
_VERSION_WORDS = frozenset({"-v", "--version", "version"})

_EPILOG = """\
configuration:
  cite config <key> <value>   set a default ("style", "locale", "format" or "intext")
  cite config <key>           show a default
  cite config reset           reset all defaults

examples:
  cite 10.1038/nphys1170 978-0-13-468599-1 --locale fr-FR --format html
  cite https://pubmed.ncbi.nlm.nih.gov/12345678 -s chicago-author-date -e -f rtf -i
  cite "url: example.com/article" --intext
  cite config style ieee

identifiers may be tagged with their type (url:, doi:, isbn:, pmid:, pmcid:);
write \\- for a leading dash. Styles and locales are listed at
https://github.com/citation-style-language/styles and
https://github.com/citation-style-language/locales.
"""

_CONFIG_USAGE = (
    'Invalid usage of the "config" command.\n'
    "Usage:\n"
    "  cite config <key> <value>  - Set a configuration key to a value.\n"
    "  cite config <key>          - Retrieve the value of a configuration key.\n"
    "  cite config reset          - Reset all configurations to defaults."
)


class UsageError(RuntimeError):
    """Command-line arguments could not be parsed."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    """Command-line flags; unset flags stay None so config defaults apply."""
    parser = _ArgumentParser(
        prog="cite",
        description=(
            "Generate formatted citations from URL, DOI, ISBN, PMID and PMCID identifiers."
        ),
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("identifiers", nargs="*", help="Identifiers to cite")
    parser.add_argument("-s", "--style", default=None, help='CSL style name (default: "apa")')
    parser.add_argument("-l", "--locale", default=None, help='Locale of the output (default: "en-US")')
    parser.add_argument(
        "-f",
        "--format",
        dest="output_format",
        default=None,
        help=f'Output format: {", ".join(OUTPUT_FORMATS)} (default: "text")',
    )
    parser.add_argument(
        "-i",
        "--intext",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include in-text citations alongside the reference list",
    )
    parser.add_argument(
        "-e",
        "--log-errors",
        action="store_true",
        default=None,
        help="Report why individual lookups failed",
    )
    parser.add_argument("-v", "--version", action="version", version=__version__)
    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    args = build_parser().parse_intermixed_args(argv)
    args.identifiers = [_unescape(value) for value in args.identifiers]
    return args


def _unescape(value: str) -> str:
    return value.replace("\\-", "-")


def handle_config(argv: list[str]) -> int:
    """``cite config <key> [value]`` / ``cite config reset``."""
    if not argv or len(argv) > 2 or any(item.startswith("-") for item in argv):
        print(_CONFIG_USAGE, file=sys.stderr)
        return 1

    key = argv[0]
    value = argv[1] if len(argv) == 2 else None

    try:
        if key == "reset":
            reset_config()
            print("All configurations have been reset to default.")
            return 0

        if value is not None:
            update_config(key, value)
            print(f"Configuration updated: {key} = {value}")
            return 0

        current = get_config_value(key)
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    if current is None:
        print(f'Key "{key}" not found.', file=sys.stderr)
    else:
        print(f"{key} = {current}")
    return 0


def display_identifiers(items: list[tuple[str, str]], message: str) -> None:
    lines = [f"{message}:"] + [f"[{type_name}] {value}" for type_name, value in items]
    print("\n".join(lines) + "\n")


def run(identifiers: list[str], settings: Settings, resolver: Resolver | None = None) -> ResolveResult:
    """Classify, resolve and print one batch of identifiers."""
    known, unknown = partition_identifiers(classify_all(identifiers))

    if unknown:
        display_identifiers(_pairs(unknown), "Unable to determine the type")
    if not known:
        return ResolveResult()

    display_identifiers(_pairs(known), "Retrieving data")

    resolver = resolver or Resolver(ResolveOptions(log_errors=settings.log_errors))
    result = resolver.resolve_all(known)

    if result.failed:
        display_identifiers(_failure_pairs(result.failed), "Failed to retrieve")

    if result.records:
        try:
            rendered = render_bibliography(
                result.records,
                style=settings.style,
                locale=settings.locale,
                output_format=settings.output_format,
                intext=settings.intext,
            )
        except RenderError as exc:
            if settings.log_errors:
                LOGGER.error("%s", exc)
            print("FAIL Failed to format references!\n")
            return result

        print("SUCCESS Successfully generated references:")
        if settings.intext:
            print(f"Reference list entries:\n{rendered.references}\n")
            print(f"In-text citation:\n{rendered.intext}\n")
        else:
            print(f"{rendered.references}\n")

    return result


def _pairs(items: list[ClassifiedIdentifier]) -> list[tuple[str, str]]:
    return [(_type_label(item.type), item.value) for item in items]


def _failure_pairs(items: list[FailureMarker]) -> list[tuple[str, str]]:
    return [(_type_label(item.type), item.identifier) for item in items]


def _type_label(identifier_type: IdentifierType) -> str:
    return "undefined" if identifier_type is IdentifierType.UNKNOWN else identifier_type.value


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute one command."""
    load_dotenv()
    argv = sys.argv[1:] if argv is None else argv

    if not argv or argv[0] in _HELP_WORDS:
        build_parser().print_help()
        return 0

    if argv[0] in _VERSION_WORDS:
        print(__version__)
        return 0

    if argv[0] == "config":
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(message)s")
        return handle_config(argv[1:])

    try:
        args = parse_args(argv)
        settings = resolve_settings(
            load_config(),
            {
                "style": args.style,
                "locale": args.locale,
                "output_format": args.output_format,
                "intext": args.intext,
                "log_errors": args.log_errors,
            },
        )
    except (UsageError, ConfigError) as exc:
        print(f"ERROR {exc}", file=sys.stderr)
        return 1

    default_level = "INFO" if settings.log_errors else "WARNING"
    logging.basicConfig(
        level=os.getenv("CITEEASE_LOG_LEVEL", default_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    run(args.identifiers, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
