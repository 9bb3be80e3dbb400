"""
Filter module for SMS Filters.

Handles rule-based classification of text messages into discount,
promotional, ISP, OTP and banking categories.
"""

from .rules import (
    MessageFilters,
    FILTER_GROUPS,
    contains_discount_keywords,
    is_promotional_sender,
    is_from_isp,
    contains_otp_keywords,
    is_from_bank,
    get_keyword_groups,
    add_keyword,
    get_default_filters,
    set_default_filters,
    reset_default_filters,
)
from .run import MessageClassifier, FilterResult, CATEGORIES, read_messages_csv

__all__ = [
    "MessageFilters",
    "FILTER_GROUPS",
    "contains_discount_keywords",
    "is_promotional_sender",
    "is_from_isp",
    "contains_otp_keywords",
    "is_from_bank",
    "get_keyword_groups",
    "add_keyword",
    "get_default_filters",
    "set_default_filters",
    "reset_default_filters",
    "MessageClassifier",
    "FilterResult",
    "CATEGORIES",
    "read_messages_csv",
]
