"""Phone number canonicalization into the configured national format."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

NON_DIAL_CHARS = re.compile(r"[^0-9+]")

DEFAULT_COUNTRY_PREFIXES: Tuple[str, ...] = ("+30", "0030")


@dataclass(frozen=True)
class PhonePolicy:
    """Numbering-plan rules of the deployment country (Greece by default)."""

    national_code: str = "30"
    type_markers: Tuple[str, ...] = ("6", "2")  # mobile, landline
    national_length: int = 10
    group_sizes: Tuple[int, ...] = (3, 3, 4)

    def is_national(self, digits: str) -> bool:
        return (
            len(digits) == self.national_length
            and digits.isdigit()
            and digits[:1] in self.type_markers
        )

    def strip_bare_national_code(self, digits: str) -> str:
        """Drop a country code typed without '+' or '00' (e.g. 30 694...)."""
        code = self.national_code
        if (
            code
            and len(digits) == self.national_length + len(code)
            and digits.isdigit()
            and digits.startswith(code)
            and digits[len(code):len(code) + 1] in self.type_markers
        ):
            return digits[len(code):]
        return digits

    def group(self, digits: str) -> str:
        parts = []
        start = 0
        for size in self.group_sizes:
            parts.append(digits[start:start + size])
            start += size
        if start < len(digits):
            parts.append(digits[start:])
        return " ".join(part for part in parts if part)


DEFAULT_POLICY = PhonePolicy()


def clean_phone(value: str) -> str:
    """Keep digits and a single leading '+'."""
    cleaned = NON_DIAL_CHARS.sub("", value)
    return cleaned[:1] + cleaned[1:].replace("+", "")


def normalize_phone(
    value: Any,
    enabled: bool = True,
    country_prefixes: Sequence[str] = DEFAULT_COUNTRY_PREFIXES,
    policy: PhonePolicy = DEFAULT_POLICY,
) -> Any:
    """Normalize a phone number to national format.

    Unrecognized numbers come back cleaned but ungrouped; disabled
    normalization and empty or non-string input come back unchanged.
    """
    if not enabled or not value or not isinstance(value, str):
        return value

    phone = clean_phone(value)

    for prefix in country_prefixes:
        if prefix and phone.startswith(prefix):
            phone = phone[len(prefix):]
            break

    phone = policy.strip_bare_national_code(phone)
    phone = phone.lstrip("0")

    if policy.is_national(phone):
        return policy.group(phone)
    return phone


class PhoneNormalizer:
    """Phone normalization bound to one deployment's configuration."""

    def __init__(
        self,
        enabled: bool = True,
        country_prefixes: Sequence[str] = DEFAULT_COUNTRY_PREFIXES,
        policy: PhonePolicy = DEFAULT_POLICY,
    ):
        self.enabled = enabled
        self.country_prefixes = tuple(country_prefixes)
        self.policy = policy

    def normalize(self, value: Any) -> Any:
        return normalize_phone(value, self.enabled, self.country_prefixes, self.policy)
