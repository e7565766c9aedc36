"""Load runtime configuration for the checkout normalizer."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..utils.errors import ConfigurationError
from .settings import RuntimeConfig

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).with_name("fields.yaml")
CONFIG_PATH_ENV = "CHECKOUT_NORMALIZER_CONFIG"

# Pattern to match env("VAR_NAME") placeholders
ENV_PATTERN = re.compile(r'env\("([^"]+)"\)')


def _resolve_env_placeholders(value: Any) -> Any:
    """Recursively resolve env("VAR") placeholders in YAML values."""
    if isinstance(value, str):
        match = ENV_PATTERN.search(value)
        if match:
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            if env_value is None:
                raise ConfigurationError(f"environment variable {var_name} not set (required by config)")
            return env_value
        return value
    elif isinstance(value, dict):
        return {k: _resolve_env_placeholders(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_placeholders(item) for item in value]
    else:
        return value


def _split_prefix_list(data: Dict[str, Any]) -> Dict[str, Any]:
    """Split a comma-separated prefix list coming from an env() placeholder."""
    phone = data.get("phone")
    if isinstance(phone, dict) and isinstance(phone.get("country_prefixes"), str):
        phone["country_prefixes"] = [item.strip() for item in phone["country_prefixes"].split(",") if item.strip()]
    return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge override dict into base dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _compute_config_version(yaml_content: str, override_content: Dict[str, Any]) -> str:
    """Compute SHA256 hash of YAML content + override content for version tracking."""
    combined = {
        "yaml": yaml_content,
        "override": json.dumps(override_content, sort_keys=True),
    }
    combined_str = json.dumps(combined, sort_keys=True)
    return hashlib.sha256(combined_str.encode("utf-8")).hexdigest()[:16]


def default_config_path() -> Path:
    override = os.getenv(CONFIG_PATH_ENV)
    return Path(override) if override else CONFIG_PATH


def load_runtime_config(
    path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> RuntimeConfig:
    """Load runtime configuration from a YAML file with optional overrides.

    Args:
        path: Optional path to the YAML file. Defaults to $CHECKOUT_NORMALIZER_CONFIG
            or the bundled fields.yaml.
        overrides: Optional dict deep-merged over the file contents.

    Returns:
        RuntimeConfig instance with resolved env placeholders and merged overrides.

    Raises:
        ConfigurationError: If the file is unreadable, a placeholder is unset,
            or the result fails validation.
    """
    target = Path(path) if path else default_config_path()
    overrides = overrides or {}

    try:
        with target.open("r", encoding="utf-8") as handle:
            yaml_content = handle.read()
        data = yaml.safe_load(yaml_content) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(str(exc), source=str(target)) from exc

    if not isinstance(data, dict):
        raise ConfigurationError("top level must be a mapping", source=str(target))

    data = _resolve_env_placeholders(data)
    data = _split_prefix_list(data)

    if overrides:
        data = _deep_merge(data, overrides)

    config_version = _compute_config_version(yaml_content, overrides)
    if not isinstance(data.get("metadata"), dict):
        data["metadata"] = {}
    data["metadata"]["config_version"] = config_version

    try:
        config = RuntimeConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(str(exc), source=str(target)) from exc

    logger.info(
        "Runtime config loaded",
        extra={"path": str(target), "config_version": config_version},
    )
    return config
