"""Applies case and phone normalization to checkout records."""

from __future__ import annotations

import time
from typing import Any, Dict, Mapping, Optional

from ..clients.logging import get_logger, log_config_load, log_normalization
from ..config.settings import (
    CATEGORIES,
    CATEGORY_LOWERCASE,
    CATEGORY_PHONE,
    CATEGORY_UPPERCASE,
    SECTIONS,
    RuntimeConfig,
)
from ..utils.case_conversion import CaseConverter, detect_uppercase_strategy
from ..utils.greek import GREEK_UPPERCASE_MAP
from ..utils.phone import PhoneNormalizer
from ..utils.sanitize import sanitize_text

logger = get_logger(__name__)

SHIP_TO_DIFFERENT_ADDRESS = "ship_to_different_address"
_UNCHECKED = {"", "0", "false", "no", "off"}


def _is_checked(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _UNCHECKED
    return bool(value)


class FieldNormalizer:
    """Server-side normalization of checkout form data and order records.

    Holds only immutable configuration, so one instance can be shared
    across request threads.
    """

    def __init__(
        self,
        runtime_config: RuntimeConfig,
        case_converter: Optional[CaseConverter] = None,
    ):
        self._config = runtime_config
        self._fields = runtime_config.fields
        self._case = case_converter or CaseConverter(
            strategy=detect_uppercase_strategy(runtime_config.case.uppercase_strategy),
            remove_greek_accents=runtime_config.case.remove_greek_accents,
        )
        phone_config = runtime_config.phone
        self._phone = PhoneNormalizer(
            enabled=phone_config.enabled,
            country_prefixes=phone_config.country_prefixes,
            policy=phone_config.policy.to_policy(),
        )

        log_config_load(
            logger,
            config_version=str(runtime_config.metadata.get("config_version", "")),
            strategy=self._case.strategy.name,
        )

    @property
    def config(self) -> RuntimeConfig:
        return self._config

    @property
    def case_converter(self) -> CaseConverter:
        return self._case

    def classify(self, field: str) -> Optional[str]:
        return self._fields.category_of(field)

    def normalize_value(self, field: str, value: Any) -> Any:
        """Normalize a single field value; unclassified fields pass through."""
        category = self.classify(field)
        if category == CATEGORY_UPPERCASE:
            return self._case.to_uppercase(sanitize_text(value))
        if category == CATEGORY_LOWERCASE:
            return self._case.to_lowercase(sanitize_text(value))
        if category == CATEGORY_PHONE:
            return self._phone.normalize(value)
        return value

    def normalize_text(
        self,
        category: str,
        value: Any,
        remove_greek_accents: Optional[bool] = None,
    ) -> Any:
        """Apply one transform directly, without a field lookup."""
        if category == CATEGORY_UPPERCASE:
            return self._case.to_uppercase(value, remove_greek_accents)
        if category == CATEGORY_LOWERCASE:
            return self._case.to_lowercase(value)
        if category == CATEGORY_PHONE:
            return self._phone.normalize(value)
        raise ValueError(f"Unknown normalization category: {category}")

    def normalize_posted_data(
        self,
        data: Mapping[str, Any],
        require_ship_flag: bool = False,
        request_id: Optional[str] = None,
        stage: str = "posted_data",
    ) -> Dict[str, Any]:
        """Normalize every classified, non-empty field of a posted form.

        With ``require_ship_flag`` set, shipping fields are left alone unless
        the customer ticked "ship to a different address".
        """
        start = time.perf_counter()
        result = dict(data)
        ship_elsewhere = _is_checked(data.get(SHIP_TO_DIFFERENT_ADDRESS))
        counts = {"processed": 0, "changed": 0, "skipped_shipping": 0}

        for field, value in data.items():
            if not value or self.classify(field) is None:
                continue
            if require_ship_flag and self._fields.section_of(field) == "shipping" and not ship_elsewhere:
                counts["skipped_shipping"] += 1
                continue
            normalized = self.normalize_value(field, value)
            counts["processed"] += 1
            if normalized != value:
                counts["changed"] += 1
            result[field] = normalized

        log_normalization(
            logger,
            stage=stage,
            field_counts=counts,
            duration_ms=int((time.perf_counter() - start) * 1000),
            request_id=request_id,
        )
        return result

    def normalize_order(
        self,
        order: Mapping[str, Any],
        request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Authoritative pass over an order record before it is persisted."""
        return self.normalize_posted_data(order, request_id=request_id, stage="order")

    def normalize_address(self, section: str, address: Mapping[str, Any]) -> Dict[str, Any]:
        """Normalize a block-checkout address whose keys lack the section prefix."""
        if section not in SECTIONS:
            raise ValueError(f"Unknown checkout section: {section}")
        result = dict(address)
        for key, value in address.items():
            field = f"{section}_{key}"
            if self._fields.section_of(field) != section:
                continue
            result[key] = self.normalize_value(field, value)
        return result

    def uppercase_labels(self, labels: Mapping[str, Any]) -> Dict[str, Any]:
        """Uppercase display names such as the country list."""
        return {code: self._case.to_uppercase(name) for code, name in labels.items()}

    def uppercase_states(self, states: Mapping[str, Any]) -> Dict[str, Any]:
        """Uppercase state names per country; non-mapping entries are kept as-is."""
        result: Dict[str, Any] = {}
        for country_code, country_states in states.items():
            if isinstance(country_states, Mapping):
                result[country_code] = self.uppercase_labels(country_states)
            else:
                result[country_code] = country_states
        return result

    def client_settings(self) -> Dict[str, Any]:
        """Settings the browser script needs to run the same conversions."""
        phone_config = self._config.phone
        return {
            "configVersion": self._config.metadata.get("config_version"),
            "fields": {category: self._fields.by_category(category) for category in CATEGORIES},
            "removeGreekAccents": self._case.remove_greek_accents,
            "greekMap": dict(GREEK_UPPERCASE_MAP),
            "phone": {
                "enabled": phone_config.enabled,
                "countryPrefixes": list(phone_config.country_prefixes),
                "nationalCode": phone_config.policy.national_code,
                "typeMarkers": list(phone_config.policy.type_markers),
                "nationalLength": phone_config.policy.national_length,
                "groupSizes": list(phone_config.policy.group_sizes),
            },
        }
