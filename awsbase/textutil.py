"""Small text helpers for turning identifiers into title-cased names."""

from __future__ import annotations

_MID_WORD = "'.\u2019:\u00b7"


def _upper_char(char: str) -> str:
    """Upper-case one character, keeping it when its upper case is not one character."""
    upper = char.upper()
    return upper if len(upper) == 1 else char


def first_upper(text: str) -> str:
    """Return the text with its first character in upper case."""
    if not text:
        return ""
    return _upper_char(text[0]) + text[1:]


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def title(text: str) -> str:
    """Upper-case the first letter of each word, leaving the other letters as they are.

    Apostrophes, periods and colons between two word characters do not
    break a word, so ``don't`` stays one word.
    """
    out: list[str] = []
    in_word = False
    for index, char in enumerate(text):
        if _is_word_char(char):
            out.append(char if in_word else _upper_char(char))
            in_word = True
            continue
        if (
            in_word
            and char in _MID_WORD
            and index + 1 < len(text)
            and _is_word_char(text[index + 1])
        ):
            out.append(char)
            continue
        out.append(char)
        in_word = False
    return "".join(out)


def id_to_title(identifier: str) -> str:
    """Join the ``-`` separated parts (or ``.`` parts if there is no ``-``), each first-upper."""
    parts = identifier.split("-")
    if len(parts) == 1:
        parts = identifier.split(".")
    return "".join(first_upper(part) for part in parts)