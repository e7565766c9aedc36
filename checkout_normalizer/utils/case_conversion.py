"""Locale-aware case conversion for checkout fields (Latin + Greek)."""

from __future__ import annotations

import logging
import unicodedata
from typing import Any, Mapping, Optional

from .errors import TransliterationError
from .greek import GREEK_UPPERCASE_MAP, apply_table, compile_table_pattern, strip_combining_marks

logger = logging.getLogger(__name__)

STRATEGY_AUTO = "auto"
STRATEGY_TRANSLITERATION = "transliteration"
STRATEGY_TABLE = "table"

NONSPACING_MARK = "Mn"


class UppercaseStrategy:
    """Common interface of the uppercase transforms.

    A strategy that cannot handle some input raises TransliterationError;
    CaseConverter then answers with the table strategy for that call.
    """

    name = "base"

    def convert(self, text: str, remove_accents: bool) -> str:
        raise NotImplementedError


class TransliterationUppercase(UppercaseStrategy):
    """Decompose, drop combining marks, recompose, then uppercase.

    Covers Greek and any other accented script the Unicode database knows,
    so no lookup table is involved.
    """

    name = STRATEGY_TRANSLITERATION

    def convert(self, text: str, remove_accents: bool) -> str:
        if not remove_accents:
            return text.upper()
        decomposed = unicodedata.normalize("NFD", text)
        stripped = "".join(char for char in decomposed if unicodedata.category(char) != NONSPACING_MARK)
        return unicodedata.normalize("NFC", stripped).upper()

    @staticmethod
    def is_available() -> bool:
        """Probe that the Unicode database decomposes accented Greek as expected."""
        decomposed = unicodedata.normalize("NFD", "\u03ac")
        return len(decomposed) == 2 and unicodedata.category(decomposed[1]) == NONSPACING_MARK


class TableUppercase(UppercaseStrategy):
    """Replace mapped Greek letters literally, then uppercase the rest.

    Input is composed (NFC) first so decomposed accents meet the table
    keys. Accents without a precomposed letter are dropped, and the table
    runs again after uppercasing because some lowercase letters expand
    into an accented capital plus a second letter.
    """

    name = STRATEGY_TABLE

    def __init__(self, table: Mapping[str, str] = GREEK_UPPERCASE_MAP):
        self._table = table
        self._pattern = compile_table_pattern(table)

    def convert(self, text: str, remove_accents: bool) -> str:
        if not remove_accents:
            return text.upper()
        text = apply_table(unicodedata.normalize("NFC", text), self._table, self._pattern)
        text = strip_combining_marks(text).upper()
        return strip_combining_marks(apply_table(text, self._table, self._pattern))


def detect_uppercase_strategy(
    preference: str = STRATEGY_AUTO,
    table: Mapping[str, str] = GREEK_UPPERCASE_MAP,
) -> UppercaseStrategy:
    """Pick the uppercase strategy once, from config preference and runtime capability."""
    if preference == STRATEGY_TABLE:
        return TableUppercase(table)
    if preference not in (STRATEGY_AUTO, STRATEGY_TRANSLITERATION):
        raise ValueError(f"Unknown uppercase strategy: {preference}")
    if TransliterationUppercase.is_available():
        return TransliterationUppercase()
    logger.warning(
        "Unicode decomposition unavailable, using table uppercase",
        extra={"requested_strategy": preference},
    )
    return TableUppercase(table)


class CaseConverter:
    """Uppercase/lowercase conversion with a table fallback.

    The primary strategy is chosen at construction, or injected. When it
    raises TransliterationError for a particular input the table strategy
    answers instead; both agree on Greek letters and plain Latin text, so
    callers see the same result either way.
    """

    def __init__(
        self,
        strategy: Optional[UppercaseStrategy] = None,
        table: Mapping[str, str] = GREEK_UPPERCASE_MAP,
        remove_greek_accents: bool = True,
    ):
        self.fallback = TableUppercase(table)
        self.strategy = strategy or detect_uppercase_strategy(table=table)
        self.remove_greek_accents = remove_greek_accents

    def to_uppercase(self, text: Any, remove_greek_accents: Optional[bool] = None) -> str:
        if not text or not isinstance(text, str):
            return ""
        remove = self.remove_greek_accents if remove_greek_accents is None else remove_greek_accents
        try:
            return self.strategy.convert(text, remove)
        except TransliterationError as exc:
            logger.warning(
                "Uppercase strategy failed, falling back to table",
                extra={"strategy": exc.strategy, "error": str(exc)},
            )
            return self.fallback.convert(text, remove)

    def to_lowercase(self, text: Any) -> str:
        if not text or not isinstance(text, str):
            return ""
        return text.strip().lower()


_default_converter = CaseConverter()


def to_uppercase(text: Any, remove_greek_accents: bool = True) -> str:
    """Uppercase ``text``, dropping Greek accents unless told otherwise."""
    return _default_converter.to_uppercase(text, remove_greek_accents)


def to_lowercase(text: Any) -> str:
    """Trim and lowercase ``text`` (used for email fields)."""
    return _default_converter.to_lowercase(text)
