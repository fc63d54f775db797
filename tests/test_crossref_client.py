from unittest.mock import MagicMock, patch

import pytest
import requests

from crossref_client import fetch_doi, normalize_doi
from http_client import SourceNotFoundError

_WORK = {
    "DOI": "10.1038/nphys1170",
    "URL": "http://dx.doi.org/10.1038/nphys1170",
    "ISSN": ["1745-2473", "1745-2481"],
    "container-title": ["Nature Physics"],
    "issue": "2",
    "issued": {"date-parts": [[2009, 2, 1]]},
    "page": "112-115",
    "publisher": "Springer Science and Business Media LLC",
    "source": "Crossref",
    "title": ["Measured measurement"],
    "volume": "5",
    "type": "journal-article",
    "author": [
        {"given": "Markus", "family": "Aspelmeyer", "sequence": "first", "affiliation": []},
        {"given": "Anton", "family": "Zeilinger", "sequence": "additional", "affiliation": []},
    ],
    "reference-count": 20,
}


def _mock_resp(payload: object, status_code: int = 200) -> MagicMock:
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = payload
    return mock


def test_fetch_doi_maps_crossref_work() -> None:
    with patch("http_client.requests.get", return_value=_mock_resp({"status": "ok", "message": _WORK})) as mock_get:
        record = fetch_doi("10.1038/nphys1170")

    assert mock_get.call_args.args[0].endswith("/works/10.1038/nphys1170")
    assert "timeout" in mock_get.call_args.kwargs

    assert record.DOI == "10.1038/nphys1170"
    assert record.title == "Measured measurement"
    assert record.container_title == "Nature Physics"
    assert record.ISSN == ["1745-2473", "1745-2481"]
    assert record.issued == {"date-parts": [[2009, 2, 1]]}
    assert record.page == "112-115"
    assert record.type == "journal-article"
    assert record.author == [
        {"given": "Markus", "family": "Aspelmeyer"},
        {"given": "Anton", "family": "Zeilinger"},
    ]
    assert record.accessed is not None
    assert len(record.id) == 16


def test_fetch_doi_strips_resolver_prefix_before_lookup() -> None:
    with patch("http_client.requests.get", return_value=_mock_resp({"message": _WORK})) as mock_get:
        fetch_doi("https://doi.org/10.1038/nphys1170")

    assert mock_get.call_args.args[0].endswith("/works/10.1038/nphys1170")


def test_fetch_doi_falls_back_to_doi_url_and_leaves_missing_fields_unset() -> None:
    work = {"DOI": "10.1000/xyz", "title": [], "type": "posted-content"}
    with patch("http_client.requests.get", return_value=_mock_resp({"message": work})):
        record = fetch_doi("10.1000/xyz")

    assert record.URL == "https://doi.org/10.1000/xyz"
    assert record.title is None
    assert record.author is None
    assert record.issued is None


def test_fetch_doi_404_is_not_found() -> None:
    with patch("http_client.requests.get", return_value=_mock_resp("Resource not found.", status_code=404)):
        with pytest.raises(SourceNotFoundError, match="10.1000/missing"):
            fetch_doi("10.1000/missing")


def test_fetch_doi_transport_error_propagates() -> None:
    with patch("http_client.requests.get", side_effect=requests.ConnectionError("boom")):
        with pytest.raises(requests.ConnectionError):
            fetch_doi("10.1000/xyz")


def test_fetch_doi_missing_message_is_parse_failure() -> None:
    with patch("http_client.requests.get", return_value=_mock_resp({"status": "ok"})):
        with pytest.raises(RuntimeError, match="missing message"):
            fetch_doi("10.1000/xyz")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("10.1000/ABC", "10.1000/ABC"),
        ("https://doi.org/10.1000/ABC", "10.1000/ABC"),
        ("http://dx.doi.org/10.1000/ABC", "10.1000/ABC"),
        ("doi:10.1000/ABC", "10.1000/ABC"),
        ("  10.1000/ABC/ ", "10.1000/ABC"),
    ],
)
def test_normalize_doi(raw: str, expected: str) -> None:
    assert normalize_doi(raw) == expected


def test_fetch_doi_is_stable_apart_from_id_and_access_date() -> None:
    with patch("http_client.requests.get", return_value=_mock_resp({"message": _WORK})):
        first = fetch_doi("10.1038/nphys1170").to_csl_json()
        second = fetch_doi("10.1038/nphys1170").to_csl_json()

    assert first["id"] != second["id"]
    for data in (first, second):
        data.pop("id")
        data.pop("accessed")
    assert first == second
