"""Greek letter table used for accent-free uppercasing."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Dict, Mapping, Pattern

# Greek typography drops accents on capitals, so every entry maps to the
# unaccented uppercase letter.
_GREEK_UPPERCASE: Dict[str, str] = {
    "α": "Α", "β": "Β", "γ": "Γ", "δ": "Δ", "ε": "Ε",
    "ζ": "Ζ", "η": "Η", "θ": "Θ", "ι": "Ι", "κ": "Κ",
    "λ": "Λ", "μ": "Μ", "ν": "Ν", "ξ": "Ξ", "ο": "Ο",
    "π": "Π", "ρ": "Ρ", "σ": "Σ", "ς": "Σ", "τ": "Τ",
    "υ": "Υ", "φ": "Φ", "χ": "Χ", "ψ": "Ψ", "ω": "Ω",
    # Accented lowercase vowels
    "ά": "Α", "έ": "Ε", "ή": "Η", "ί": "Ι", "ό": "Ο",
    "ύ": "Υ", "ώ": "Ω",
    # Diaeresis, with and without tonos
    "ϊ": "Ι", "ϋ": "Υ", "ΐ": "Ι", "ΰ": "Υ",
    "Ϊ": "Ι", "Ϋ": "Υ",
    # Accented capitals
    "Ά": "Α", "Έ": "Ε", "Ή": "Η", "Ί": "Ι", "Ό": "Ο",
    "Ύ": "Υ", "Ώ": "Ω",
    # Upsilon hook symbol with tonos and diaeresis
    "ϓ": "ϒ", "ϔ": "ϒ",
}

# Greek Extended (polytonic) letters: breathings, accents, iota
# subscript and length marks all fold to the bare capital.
_POLYTONIC_RANGES = {
    "Α": ((0x1F00, 0x1F0F), (0x1F70, 0x1F71), (0x1F80, 0x1F8F), (0x1FB0, 0x1FB4), (0x1FB6, 0x1FBC)),
    "Ε": ((0x1F10, 0x1F15), (0x1F18, 0x1F1D), (0x1F72, 0x1F73), (0x1FC8, 0x1FC9)),
    "Η": ((0x1F20, 0x1F2F), (0x1F74, 0x1F75), (0x1F90, 0x1F9F), (0x1FC2, 0x1FC4), (0x1FC6, 0x1FC7),
          (0x1FCA, 0x1FCC)),
    "Ι": ((0x1F30, 0x1F3F), (0x1F76, 0x1F77), (0x1FBE, 0x1FBE), (0x1FD0, 0x1FD3), (0x1FD6, 0x1FDB)),
    "Ο": ((0x1F40, 0x1F45), (0x1F48, 0x1F4D), (0x1F78, 0x1F79), (0x1FF8, 0x1FF9)),
    "Υ": ((0x1F50, 0x1F57), (0x1F59, 0x1F59), (0x1F5B, 0x1F5B), (0x1F5D, 0x1F5D), (0x1F5F, 0x1F5F),
          (0x1F7A, 0x1F7B), (0x1FE0, 0x1FE3), (0x1FE6, 0x1FEB)),
    "Ρ": ((0x1FE4, 0x1FE5), (0x1FEC, 0x1FEC)),
    "Ω": ((0x1F60, 0x1F6F), (0x1F7C, 0x1F7D), (0x1FA0, 0x1FAF), (0x1FF2, 0x1FF4), (0x1FF6, 0x1FF7),
          (0x1FFA, 0x1FFC)),
}

for capital, ranges in _POLYTONIC_RANGES.items():
    for first, last in ranges:
        _GREEK_UPPERCASE.update(dict.fromkeys(map(chr, range(first, last + 1)), capital))

GREEK_UPPERCASE_MAP: Mapping[str, str] = MappingProxyType(_GREEK_UPPERCASE)

# Combining Diacritical Marks block; covers the Greek tonos, dialytika,
# breathings, perispomeni and ypogegrammeni.
COMBINING_MARKS = re.compile("[\u0300-\u036f]")


def compile_table_pattern(table: Mapping[str, str]) -> Pattern[str]:
    """Build one alternation that matches any table key literally.

    Longer keys come first so a multi-character entry wins over its
    single-character prefix.
    """
    if not table:
        raise ValueError("Conversion table must not be empty")
    keys = sorted(table, key=len, reverse=True)
    return re.compile("|".join(re.escape(key) for key in keys))


def apply_table(text: str, table: Mapping[str, str], pattern: Pattern[str]) -> str:
    """Replace every non-overlapping table key occurrence in one pass."""
    return pattern.sub(lambda match: table[match.group(0)], text)


def strip_combining_marks(text: str) -> str:
    """Drop combining accents left over when no precomposed letter exists."""
    return COMBINING_MARKS.sub("", text)
