"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any, Dict

import pytest

from checkout_normalizer.config.config_loader import CONFIG_PATH, load_runtime_config
from checkout_normalizer.config.settings import RuntimeConfig
from checkout_normalizer.services.field_normalizer import FieldNormalizer


@pytest.fixture
def config_path() -> Path:
    """Return path to the bundled field configuration."""
    return CONFIG_PATH


@pytest.fixture
def runtime_config(config_path: Path) -> RuntimeConfig:
    """Load the bundled Greek checkout configuration."""
    return load_runtime_config(config_path)


@pytest.fixture
def field_normalizer(runtime_config: RuntimeConfig) -> FieldNormalizer:
    return FieldNormalizer(runtime_config)


@pytest.fixture
def posted_checkout() -> Dict[str, Any]:
    """A classic checkout form submission with Greek input."""
    return {
        "billing_first_name": "  Γιώργος ",
        "billing_last_name": "Παπαδόπουλος",
        "billing_company": "",
        "billing_address_1": "Οδός Ερμού 12",
        "billing_city": "Αθήνα",
        "billing_postcode": "10563",
        "billing_email": "  Giorgos@Example.GR ",
        "billing_phone": "+30 694 123 4567",
        "shipping_first_name": "μαρία",
        "shipping_city": "Θεσσαλονίκη",
        "shipping_phone": "0030 2310 123456",
        "order_comments": "παρακαλώ καλέστε πριν",
        "payment_method": "cod",
    }


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a YAML document to a temp file and return its path."""

    def _write(content: str) -> Path:
        target = tmp_path / "fields.yaml"
        target.write_text(content, encoding="utf-8")
        return target

    return _write
