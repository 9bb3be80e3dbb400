"""
Configuration management for message filter tables.

Handles loading and saving of the message_filters.yaml file.
"""

import yaml
from pathlib import Path
from typing import Dict, List, Any

from .filters.rules import (
    MessageFilters,
    FILTER_GROUPS,
    SHORT_CODE_MIN_DIGITS,
    SHORT_CODE_MAX_DIGITS,
    compile_short_code_pattern,
)


ALLOWED_KEYS = set(FILTER_GROUPS) | {"short_code", "metadata"}


def load_filters(path: str) -> Dict[str, Any]:
    """
    Load filter tables from YAML file.

    Args:
        path: Path to message_filters.yaml

    Returns:
        Dictionary containing the filter configuration. Every key is
        optional; missing groups fall back to the built-in tables.

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        ValueError: If the structure is invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        raise ValueError(f"Configuration file is empty: {path}")

    validate_filters(data)

    return data


def validate_filters(data: Any) -> None:
    """
    Validate a filter configuration mapping.

    Args:
        data: Parsed YAML content

    Raises:
        ValueError: If the structure is invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Filter configuration must be a mapping")

    unknown = sorted(str(key) for key in data if key not in ALLOWED_KEYS)
    if unknown:
        raise ValueError(f"Unknown key(s) in configuration: {', '.join(unknown)}")

    for group in FILTER_GROUPS:
        if group not in data:
            continue

        entries = data[group]
        # An empty YAML list value (e.g. "promotional_senders:") parses as None
        if entries is None:
            continue

        if not isinstance(entries, list):
            raise ValueError(f"'{group}' must be a list")

        for idx, entry in enumerate(entries):
            if not isinstance(entry, str) or not entry:
                raise ValueError(
                    f"Entry at index {idx} in '{group}' must be a non-empty string"
                )

    # An empty "short_code:" parses as None and means defaults
    short_code = data.get("short_code")

    if short_code is not None:
        if not isinstance(short_code, dict):
            raise ValueError("'short_code' must be a mapping")

        for field in ("min_digits", "max_digits"):
            value = short_code.get(field)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise ValueError(f"'short_code.{field}' must be an integer")

        min_digits = short_code.get("min_digits")
        max_digits = short_code.get("max_digits")

        compile_short_code_pattern(
            SHORT_CODE_MIN_DIGITS if min_digits is None else min_digits,
            SHORT_CODE_MAX_DIGITS if max_digits is None else max_digits,
        )


def build_filters(data: Dict[str, Any]) -> MessageFilters:
    """
    Build a MessageFilters instance from a configuration mapping.

    Args:
        data: Configuration dictionary from load_filters()

    Returns:
        MessageFilters with configured tables (defaults for missing groups)
    """
    validate_filters(data)

    kwargs = {}
    for group in FILTER_GROUPS:
        if group in data:
            kwargs[group] = data[group] or []

    short_code = data.get("short_code")
    if short_code is not None:
        if short_code.get("min_digits") is not None:
            kwargs["short_code_min_digits"] = short_code["min_digits"]
        if short_code.get("max_digits") is not None:
            kwargs["short_code_max_digits"] = short_code["max_digits"]

    return MessageFilters(**kwargs)


def load_message_filters(path: str) -> MessageFilters:
    """Load a YAML file and build MessageFilters from it."""
    return build_filters(load_filters(path))


def filters_to_dict(filters: MessageFilters) -> Dict[str, Any]:
    """
    Serialize a MessageFilters instance to a configuration mapping.

    Args:
        filters: Filters to serialize

    Returns:
        Dictionary accepted by build_filters() and save_filters()
    """
    data: Dict[str, Any] = {}
    groups: Dict[str, List[str]] = filters.get_keyword_groups()

    for group in FILTER_GROUPS:
        data[group] = groups[group]

    data["short_code"] = {
        "min_digits": filters.short_code_min_digits,
        "max_digits": filters.short_code_max_digits,
    }

    return data


def save_filters(path: str, data: Dict[str, Any]) -> None:
    """
    Save filter tables to YAML file.

    Note: This will overwrite the existing file and does not preserve
    comments.

    Args:
        path: Path to save message_filters.yaml
        data: Dictionary containing filter configuration

    Raises:
        IOError: If file cannot be written
    """
    config_path = Path(path)

    # Ensure parent directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
