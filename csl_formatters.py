"""RTF and AsciiDoc output formats for the citeproc-py engine.

citeproc-py takes its output format as a module-like object exposing
``preformat`` plus one ``str`` subclass per font effect (the shape of
``citeproc.formatter.html``). It ships text, HTML and reST; the two formats
below complete the set the CLI offers.
"""

from __future__ import annotations

from types import SimpleNamespace

_EFFECTS = ("Italic", "Oblique", "Bold", "Light", "Underline", "Superscript", "Subscript", "SmallCaps")


class _Wrapper(str):
    """A string that wraps its text in ``opening``/``closing`` on creation."""

    opening = ""
    closing = ""

    def __new__(cls, text: str) -> _Wrapper:
        return super().__new__(cls, f"{cls.opening}{text}{cls.closing}")


def _wrapper(name: str, opening: str, closing: str) -> type[_Wrapper]:
    return type(name, (_Wrapper,), {"opening": opening, "closing": closing})


def _formatter(preformat, wrappers: dict[str, tuple[str, str]]) -> SimpleNamespace:
    missing = set(_EFFECTS) - wrappers.keys()
    if missing:
        raise ValueError(f"Formatter is missing effects: {sorted(missing)}")
    namespace = {name: _wrapper(name, opening, closing) for name, (opening, closing) in wrappers.items()}
    return SimpleNamespace(preformat=preformat, **namespace)


def rtf_escape(text: str) -> str:
    """Escape RTF control characters; non-ASCII becomes ``\\uN?``."""
    out: list[str] = []
    for char in str(text):
        if char in "\\{}":
            out.append("\\" + char)
        elif ord(char) > 127:
            code = ord(char)
            # RTF \u takes a signed 16-bit value.
            if code > 32767:
                code -= 65536
            out.append(f"\\u{code}?")
        else:
            out.append(char)
    return "".join(out)


def asciidoc_preformat(text: str) -> str:
    return str(text)


rtf = _formatter(
    rtf_escape,
    {
        "Italic": ("{\\i ", "}"),
        "Oblique": ("{\\i ", "}"),
        "Bold": ("{\\b ", "}"),
        "Light": ("{\\b0 ", "}"),
        "Underline": ("{\\ul ", "}"),
        "Superscript": ("{\\super ", "}"),
        "Subscript": ("{\\sub ", "}"),
        "SmallCaps": ("{\\scaps ", "}"),
    },
)

asciidoc = _formatter(
    asciidoc_preformat,
    {
        # Unconstrained marks so emphasis also works inside words.
        "Italic": ("__", "__"),
        "Oblique": ("__", "__"),
        "Bold": ("**", "**"),
        "Light": ("", ""),
        "Underline": ("[.underline]#", "#"),
        "Superscript": ("^", "^"),
        "Subscript": ("~", "~"),
        "SmallCaps": ("[.small-caps]#", "#"),
    },
)
