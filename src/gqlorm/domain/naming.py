"""Identifier conventions and the fixed table-name pluralization rule.

Pure string functions, no dependencies. Table names are the configured
convention applied to the singular type name, then pluralized:

* ``s``, ``x``, ``z``, ``ch``, ``sh`` endings take ``es`` (``Box`` -> ``Boxes``)
* consonant + ``y`` becomes ``ies`` (``Category`` -> ``Categories``)
* everything else takes ``s``

This is deliberately not a natural-language inflector.
"""

from __future__ import annotations

from gqlorm.domain.types import NamingConvention

_VOWELS = frozenset("aeiou")
_ES_SUFFIXES = ("s", "x", "z", "ch", "sh")

RUST_KEYWORDS: frozenset[str] = frozenset(
    {
        "as", "async", "await", "box", "break", "const", "continue", "crate", "dyn",
        "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in", "let",
        "loop", "match", "mod", "move", "mut", "pub", "ref", "return", "self",
        "static", "struct", "super", "trait", "true", "type", "unsafe", "use",
        "where", "while", "yield",
    }
)  # fmt: skip


def to_snake_case(name: str) -> str:
    """Convert ``camelCase``/``PascalCase`` to ``snake_case``.

    Acronyms stay together: ``APIKey`` -> ``api_key``,
    ``XMLHttpRequest`` -> ``xml_http_request``.
    """
    out: list[str] = []
    for i, ch in enumerate(name):
        if ch.isupper():
            if i > 0:
                prev = name[i - 1]
                nxt = name[i + 1] if i + 1 < len(name) else ""
                if prev.islower() or prev.isdigit() or (prev.isupper() and nxt.islower()):
                    out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def to_pascal_case(name: str) -> str:
    """Convert any supported style to ``PascalCase``."""
    words = [w for w in to_snake_case(name).split("_") if w]
    return "".join(w[0].upper() + w[1:] for w in words)


def to_camel_case(name: str) -> str:
    """Convert any supported style to ``camelCase``."""
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def apply_convention(name: str, convention: NamingConvention) -> str:
    if convention is NamingConvention.CAMEL_CASE:
        return to_camel_case(name)
    if convention is NamingConvention.PASCAL_CASE:
        return to_pascal_case(name)
    return to_snake_case(name)


def pluralize(word: str) -> str:
    """Pluralize *word* with the fixed rule documented in this module."""
    if not word:
        return word
    lower = word.lower()
    if lower.endswith(_ES_SUFFIXES):
        return word + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in _VOWELS:
        return word[:-1] + "ies"
    return word + "s"


def table_name(type_name: str, convention: NamingConvention) -> str:
    """Table name for a GraphQL object type: convention, then plural."""
    return pluralize(apply_convention(type_name, convention))


def rust_ident(name: str) -> str:
    """A snake_case Rust identifier, raw-escaped when it collides with a keyword."""
    ident = to_snake_case(name)
    if ident in RUST_KEYWORDS:
        return f"r#{ident}"
    return ident
