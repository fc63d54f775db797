import pytest

from identifiers import classify, classify_all, partition_identifiers
from models import IdentifierType


@pytest.mark.parametrize(
    ("raw", "expected_type", "expected_value"),
    [
        ("10.1038/nphys1170", IdentifierType.DOI, "10.1038/nphys1170"),
        ("https://doi.org/10.1038/nphys1170", IdentifierType.DOI, "https://doi.org/10.1038/nphys1170"),
        ("https://example.com/blog/post?id=1", IdentifierType.URL, "https://example.com/blog/post?id=1"),
        ("PMC7654321", IdentifierType.PMCID, "PMC7654321"),
        ("12345678", IdentifierType.PMID, "12345678"),
        ("978-0-13-468599-1", IdentifierType.ISBN, "978-0-13-468599-1"),
        ("  10.1000/xyz123  ", IdentifierType.DOI, "10.1000/xyz123"),
    ],
)
def test_classify_detects_type_from_shape(raw: str, expected_type: IdentifierType, expected_value: str) -> None:
    result = classify(raw)
    assert result.type is expected_type
    assert result.value == expected_value


@pytest.mark.parametrize(
    ("raw", "expected_type", "expected_value"),
    [
        ("pmid: 123", IdentifierType.PMID, "123"),
        ("url:example.com", IdentifierType.URL, "example.com"),
        ("doi: not-a-doi", IdentifierType.DOI, "not-a-doi"),
        ("isbn:12", IdentifierType.ISBN, "12"),
        ("pmcid: 42", IdentifierType.PMCID, "42"),
    ],
)
def test_classify_prefix_forces_type_without_validation(
    raw: str, expected_type: IdentifierType, expected_value: str
) -> None:
    result = classify(raw)
    assert result.type is expected_type
    assert result.value == expected_value


def test_classify_prefers_doi_over_url_for_resolver_links() -> None:
    """A doi.org link matches both patterns; DOI must win."""
    assert classify("http://dx.doi.org/10.1000/182").type is IdentifierType.DOI


@pytest.mark.parametrize("raw", ["example.com", "hello world", "123", "", "PMCabc"])
def test_classify_unknown(raw: str) -> None:
    result = classify(raw)
    assert result.type is IdentifierType.UNKNOWN
    assert result.value == raw.strip()


def test_classify_all_keeps_input_positions_and_partition_keeps_order() -> None:
    classified = classify_all(["nonsense", "10.1038/nphys1170", "12345678", "also nonsense"])

    assert [item.index for item in classified] == [0, 1, 2, 3]

    known, unknown = partition_identifiers(classified)
    assert [item.type for item in known] == [IdentifierType.DOI, IdentifierType.PMID]
    assert [item.value for item in unknown] == ["nonsense", "also nonsense"]
    assert [item.index for item in unknown] == [0, 3]
