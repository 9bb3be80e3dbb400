"""Tests for loading and saving filter tables."""

import pytest
import yaml

from smsfilters.config import (
    load_filters,
    save_filters,
    build_filters,
    filters_to_dict,
    load_message_filters,
    validate_filters,
)
from smsfilters.filters import MessageFilters


def write_yaml(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_sample_config_matches_builtin_tables(sample_config_path):
    filters = load_message_filters(str(sample_config_path))

    assert filters.get_keyword_groups() == MessageFilters().get_keyword_groups()
    assert filters.short_code_min_digits == 4
    assert filters.short_code_max_digits == 6


def test_missing_groups_fall_back_to_defaults(tmp_path):
    path = write_yaml(tmp_path / "filters.yaml", "discount_keywords:\n  - rebate\n")

    filters = load_message_filters(path)

    assert filters.contains_discount_keywords("REBATE")
    assert not filters.contains_discount_keywords("sale")
    assert filters.otp_keywords == MessageFilters().otp_keywords


def test_empty_group_value(tmp_path):
    path = write_yaml(tmp_path / "filters.yaml", "banking_phone_numbers:\n")

    filters = load_message_filters(path)

    assert filters.banking_phone_numbers == frozenset()
    assert not filters.is_from_bank("Random Co", "09999987641")


def test_short_code_from_config(tmp_path):
    path = write_yaml(
        tmp_path / "filters.yaml",
        "short_code:\n  min_digits: 3\n  max_digits: 5\n",
    )

    filters = load_message_filters(path)

    assert filters.is_promotional_sender("123")
    assert not filters.is_promotional_sender("123456")


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_filters(str(tmp_path / "missing.yaml"))


def test_load_empty_file(tmp_path):
    path = write_yaml(tmp_path / "filters.yaml", "")

    with pytest.raises(ValueError):
        load_filters(path)


def test_load_invalid_yaml(tmp_path):
    path = write_yaml(tmp_path / "filters.yaml", "discount_keywords: [sale\n")

    with pytest.raises(yaml.YAMLError):
        load_filters(path)


@pytest.mark.parametrize("data", [
    ["sale"],
    {"spam_keywords": ["x"]},
    {"discount_keywords": "sale"},
    {"discount_keywords": ["sale", 5]},
    {"discount_keywords": [""]},
    {"short_code": 5},
    {"short_code": {"min_digits": "4"}},
    {"short_code": {"min_digits": True}},
    {"short_code": {"min_digits": 7, "max_digits": 6}},
    {"short_code": {"min_digits": 0}},
])
def test_validate_rejects_bad_structure(data):
    with pytest.raises(ValueError):
        validate_filters(data)


def test_metadata_key_is_allowed():
    filters = build_filters({"metadata": {"owner": "ops"}, "isp_senders": ["MCI"]})

    assert filters.is_from_isp("mci")
    assert not filters.is_from_isp("irancell")


def test_save_and_reload(tmp_path):
    updated = MessageFilters().with_keyword("otp_keywords", "کد ورود")
    path = tmp_path / "nested" / "filters.yaml"

    save_filters(str(path), filters_to_dict(updated))
    reloaded = load_message_filters(str(path))

    assert reloaded.get_keyword_groups() == updated.get_keyword_groups()
    assert reloaded.contains_otp_keywords("کد ورود شما 1234")
    assert "کد ورود" in path.read_text(encoding="utf-8")


def test_empty_short_code_uses_defaults(tmp_path):
    path = write_yaml(tmp_path / "filters.yaml", "short_code:\nisp_senders:\n  - MCI\n")

    filters = load_message_filters(path)

    assert filters.short_code_min_digits == 4
    assert filters.short_code_max_digits == 6
    assert filters.is_promotional_sender("12345")


def test_null_short_code_bound_uses_default():
    filters = build_filters({"short_code": {"min_digits": None, "max_digits": 5}})

    assert filters.short_code_min_digits == 4
    assert filters.is_promotional_sender("12345")
    assert not filters.is_promotional_sender("123456")
