"""Derived search keys stored alongside each user name."""

from __future__ import annotations

_HANGUL_BASE = 0xAC00
_HANGUL_LAST = 0xD7A3
_SYLLABLES_PER_INITIAL = 21 * 28

CHOSEONG = (
    "ㄱ", "ㄲ", "ㄴ", "ㄷ", "ㄸ", "ㄹ", "ㅁ", "ㅂ", "ㅃ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅉ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
)


def lower_name(name: str | None) -> str:
    return (name or "").lower()


def email_key(email: str | None) -> str:
    """
    Lower-cased email used for uniqueness and lookups.

    Lowering happens here rather than in SQL: SQLite's lower() only folds ASCII.
    """
    return (email or "").strip().lower()


def phonetic_key(name: str | None) -> str:
    """
    Build the initial-consonant key for a name.

    Hangul syllables map to their leading consonant (홍길동 -> ㅎㄱㄷ), so
    users can be found by typing initials only. Other letters and digits are
    kept lower-cased; whitespace and punctuation are dropped.
    """
    out: list[str] = []
    for ch in name or "":
        code = ord(ch)
        if _HANGUL_BASE <= code <= _HANGUL_LAST:
            out.append(CHOSEONG[(code - _HANGUL_BASE) // _SYLLABLES_PER_INITIAL])
        elif ch.isalnum():
            out.append(ch.lower())
    return "".join(out)
