"""Web page scraping: URL -> canonical citation record or identifier redirect.

Metadata comes from the page's <title> and meta tags. Before building a
generic ``webpage`` record the page is searched for a DOI, PMID or PMCID; when
one is found the caller is told to re-resolve through that identifier instead,
since those sources carry richer metadata than the page itself.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

import http_client
from http_client import SourceForbiddenError
from models import (
    CitationRecord,
    IdentifierType,
    Redirect,
    accessed_now,
    authors_from_names,
    parse_date_text,
)

PUBMED_HOST_PREFIX = "https://pubmed.ncbi.nlm.nih.gov"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_KEYWORD_PMID_RE = re.compile(r"pmid:(\d+)")
_KEYWORD_PMCID_RE = re.compile(r"PMC\d+")
_KEYWORD_DOI_RE = re.compile(r"doi:([^,]+)")

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PageIdentifiers:
    """Identifiers discovered in a page's metadata."""

    doi: str | None = None
    pmid: str | None = None
    pmcid: str | None = None

    def best_redirect(self) -> Redirect | None:
        """Highest-priority identifier: DOI, then PMID, then PMCID."""
        if self.doi:
            return Redirect(IdentifierType.DOI, self.doi)
        if self.pmid:
            return Redirect(IdentifierType.PMID, self.pmid)
        if self.pmcid:
            return Redirect(IdentifierType.PMCID, self.pmcid)
        return None


def fetch_url(url: str) -> CitationRecord | Redirect:
    """Fetch a page and return a webpage record, or a redirect to a better source."""
    url = ensure_scheme(url)
    LOGGER.debug("Page fetch: url=%s", url)

    response = http_client.get(url, accept="text/html,application/xhtml+xml")
    if response.status_code == 403:
        raise SourceForbiddenError(f'Unable to retrieve data for URL "{url}". Site responded with HTTP 403')
    response.raise_for_status()

    soup = BeautifulSoup(response.text, "html.parser")

    redirect = find_identifiers(soup, url).best_redirect()
    if redirect is not None:
        LOGGER.info("Page %s exposes %s %s; redirecting", url, redirect.type.value, redirect.value)
        return redirect

    return build_webpage_record(soup, url)


def ensure_scheme(url: str) -> str:
    return url if _SCHEME_RE.match(url) else f"https://{url}"


def find_identifiers(soup: BeautifulSoup, url: str) -> PageIdentifiers:
    """Look for DOI / PMID / PMCID in meta tags.

    PubMed article pages also list them in the ``keywords`` meta tag
    (``pmid:123, PMC456, doi:10.x/y``).
    """
    keyword_doi = keyword_pmid = keyword_pmcid = None
    if url.startswith(PUBMED_HOST_PREFIX):
        keywords = _meta_content(soup, name="keywords")
        if keywords:
            if match := _KEYWORD_PMID_RE.search(keywords):
                keyword_pmid = match.group(1)
            if match := _KEYWORD_PMCID_RE.search(keywords):
                keyword_pmcid = match.group(0)
            if match := _KEYWORD_DOI_RE.search(keywords):
                keyword_doi = match.group(1).strip()

    doi = _meta_content(soup, name="publication_doi") or _meta_content(soup, name="citation_doi") or keyword_doi
    pmid = _meta_content(soup, name="ncbi_uid") or keyword_pmid
    return PageIdentifiers(doi=doi, pmid=pmid, pmcid=keyword_pmcid)


def build_webpage_record(soup: BeautifulSoup, url: str) -> CitationRecord:
    """Generic ``webpage`` record; tags that are missing leave fields unset."""
    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    return CitationRecord(
        type="webpage",
        title=title or None,
        author=authors_from_names(_author_names(soup)),
        container_title=_meta_content(soup, prop="og:site_name"),
        publisher=_meta_content(soup, prop="article:publisher"),
        accessed=accessed_now(),
        issued=parse_date_text(_meta_content(soup, name="date")),
        URL=_meta_content(soup, prop="og:url") or url,
    )


def _author_names(soup: BeautifulSoup) -> list[str]:
    names: list[str] = []
    for meta in soup.find_all("meta", attrs={"name": ["author", "article:author"]}):
        content = meta.get("content")
        if isinstance(content, str) and content.strip():
            names.append(content.strip())
    return names


def _meta_content(soup: BeautifulSoup, *, name: str | None = None, prop: str | None = None) -> str | None:
    attrs = {"name": name} if name else {"property": prop}
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = tag.get("content")
    return content.strip() if isinstance(content, str) and content.strip() else None
