import pytest

import csl_formatters
from csl_formatters import _formatter, asciidoc, rtf, rtf_escape


def test_rtf_escape_control_characters_and_unicode() -> None:
    assert rtf_escape("{a}\\b") == "\\{a\\}\\\\b"
    assert rtf_escape("café") == "caf\\u233?"
    assert rtf_escape("plain") == "plain"


def test_rtf_escape_uses_signed_16_bit_codes() -> None:
    assert rtf_escape("￠") == "\\u-32?"


@pytest.mark.parametrize(
    ("effect", "expected"),
    [
        ("Italic", "{\\i Title}"),
        ("Bold", "{\\b Title}"),
        ("Underline", "{\\ul Title}"),
        ("Superscript", "{\\super Title}"),
        ("SmallCaps", "{\\scaps Title}"),
    ],
)
def test_rtf_effects(effect: str, expected: str) -> None:
    assert getattr(rtf, effect)("Title") == expected


@pytest.mark.parametrize(
    ("effect", "expected"),
    [
        ("Italic", "__Title__"),
        ("Bold", "**Title**"),
        ("Light", "Title"),
        ("Underline", "[.underline]#Title#"),
        ("Subscript", "~Title~"),
    ],
)
def test_asciidoc_effects(effect: str, expected: str) -> None:
    assert getattr(asciidoc, effect)("Title") == expected


def test_wrappers_are_strings() -> None:
    value = asciidoc.Italic("x")
    assert isinstance(value, str)
    assert value + "!" == "__x__!"


def test_formatters_expose_every_effect() -> None:
    for formatter in (csl_formatters.rtf, csl_formatters.asciidoc):
        for effect in csl_formatters._EFFECTS:
            assert callable(getattr(formatter, effect))
        assert callable(formatter.preformat)


def test_formatter_missing_effect_raises() -> None:
    with pytest.raises(ValueError, match="SmallCaps"):
        _formatter(str, {name: ("", "") for name in csl_formatters._EFFECTS if name != "SmallCaps"})
