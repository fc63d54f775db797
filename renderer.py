"""Bibliography rendering through the citeproc-py CSL engine.

Style definitions are fetched by name from the CSL styles repository. The
locale is fetched from the CSL locales repository to confirm it exists before
the engine loads its own bundled copy of the same file.
"""

from __future__ import annotations

import logging
import tempfile
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests
from citeproc import Citation, CitationItem, CitationStylesBibliography, CitationStylesStyle
from citeproc.formatter import html as html_formatter
from citeproc.formatter import plain as plain_formatter
from citeproc.source.json import CiteProcJSON

import csl_formatters
import http_client
from models import CitationRecord

CSL_STYLES_URL = "https://raw.githubusercontent.com/citation-style-language/styles/master"
CSL_LOCALES_URL = "https://raw.githubusercontent.com/citation-style-language/locales/master"

OUTPUT_FORMATS: dict[str, Any] = {
    "text": plain_formatter,
    "html": html_formatter,
    "rtf": csl_formatters.rtf,
    "asciidoc": csl_formatters.asciidoc,
}

DEFAULT_STYLE = "apa"
DEFAULT_LOCALE = "en-US"
DEFAULT_FORMAT = "text"

# Crossref work types that are not CSL types.
_CSL_TYPE_ALIASES = {
    "book-chapter": "chapter",
    "book-part": "chapter",
    "book-section": "chapter",
    "book-series": "book",
    "book-set": "book",
    "book-track": "chapter",
    "edited-book": "book",
    "monograph": "book",
    "reference-book": "book",
    "journal-issue": "periodical",
    "journal-volume": "periodical",
    "journal": "periodical",
    "proceedings-article": "paper-conference",
    "proceedings": "book",
    "posted-content": "article",
    "peer-review": "review",
    "component": "document",
    "other": "document",
    "report-series": "report",
    "standard-series": "standard",
    "dissertation": "thesis",
    "journal-article": "article-journal",
    "reference-entry": "entry",
    "database": "dataset",
    "grant": "document",
}
_FALLBACK_CSL_TYPE = "document"
_NUMERIC_FIELDS = ("number-of-pages", "volume", "issue", "page")

LOGGER = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """The bibliography could not be produced; nothing partial is returned."""


@dataclass(frozen=True, slots=True)
class RenderResult:
    references: str
    intext: str | None = None


def render_bibliography(
    records: list[CitationRecord],
    style: str = DEFAULT_STYLE,
    locale: str = DEFAULT_LOCALE,
    output_format: str = DEFAULT_FORMAT,
    intext: bool = False,
) -> RenderResult:
    """Format ``records`` (in the given order) with a CSL style and locale."""
    formatter = OUTPUT_FORMATS.get(output_format.lower())
    if formatter is None:
        raise RenderError(
            f'Unsupported output format "{output_format}". Allowed formats are: {", ".join(OUTPUT_FORMATS)}'
        )
    if not records:
        raise RenderError("No citation records to format")

    style_xml = fetch_style(style)
    fetch_locale(locale)

    try:
        references, intext_entries = _run_engine(records, style_xml, locale, formatter, output_format.lower())
    except RenderError:
        raise
    except Exception as exc:  # engine internals raise many unrelated types
        raise RenderError(f"Failed to format references with style \"{style}\": {exc}") from exc

    LOGGER.info("Rendered %s references style=%s locale=%s format=%s", len(records), style, locale, output_format)
    return RenderResult(references=references, intext=intext_entries if intext else None)


def fetch_style(style: str) -> str:
    return _fetch_definition(f"{CSL_STYLES_URL}/{style}.csl", f'Failed to retrieve style "{style}"')


def fetch_locale(locale: str) -> str:
    return _fetch_definition(f"{CSL_LOCALES_URL}/locales-{locale}.xml", f'Failed to retrieve locale "{locale}"')


def _fetch_definition(url: str, failure_message: str) -> str:
    try:
        response = http_client.get(url)
    except requests.RequestException as exc:
        raise RenderError(f"{failure_message}: {exc}") from exc

    text = response.text
    if response.status_code >= 400 or text.startswith("404:"):
        raise RenderError(failure_message)
    return text


def to_engine_item(record: CitationRecord) -> dict[str, Any]:
    """CSL-JSON input for the engine: lower-case id, CSL type, string numbers."""
    item = record.to_csl_json()
    item["id"] = record.id.lower()
    item["type"] = _CSL_TYPE_ALIASES.get(record.type or "", record.type) or _FALLBACK_CSL_TYPE

    for key in _NUMERIC_FIELDS:
        if key in item:
            item[key] = str(item[key])
    if record.ISSN:
        item["ISSN"] = ", ".join(record.ISSN)

    if record.author:
        names = [{part: value for part, value in name.items() if value} for name in record.author]
        names = [name for name in names if name]
        if names:
            item["author"] = names
        else:
            item.pop("author")
    return item


def _run_engine(
    records: list[CitationRecord],
    style_xml: str,
    locale: str,
    formatter: Any,
    output_format: str,
) -> tuple[str, str]:
    source = CiteProcJSON([to_engine_item(record) for record in records])

    with tempfile.TemporaryDirectory() as tmp:
        style_path = Path(tmp) / "style.csl"
        style_path.write_text(style_xml, encoding="utf-8")
        with warnings.catch_warnings():
            # Unsupported variables and schema hints are reported as warnings.
            warnings.simplefilter("ignore")
            style = CitationStylesStyle(str(style_path), locale=locale, validate=False)

    bibliography = CitationStylesBibliography(style, source, formatter)
    citations = [Citation([CitationItem(record.id.lower())]) for record in records]
    for citation in citations:
        bibliography.register(citation)
    bibliography.sort()

    intext = [str(bibliography.cite(citation, _warn_missing)) for citation in citations]
    entries = [str(entry) for entry in bibliography.bibliography()]
    if not entries:
        raise RenderError("The style produced no bibliography entries")

    if output_format == "html":
        body = "\n".join(f'  <div class="csl-entry">{entry}</div>' for entry in entries)
        references = f'<div class="csl-bib-body">\n{body}\n</div>'
    else:
        references = "\n".join(entries)
    return references, "\n".join(intext)


def _warn_missing(citation_item: CitationItem) -> None:
    LOGGER.warning("Reference with key '%s' not found in the bibliography", citation_item.key)
