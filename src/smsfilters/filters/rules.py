"""
Filter rules for SMS Filters.

Defines the static keyword, sender and phone-number tables used to classify
incoming text messages, and the predicates evaluated against them.
Keywords span Latin and Persian script, so all matching uses full Unicode
case folding.
"""

import re
from dataclasses import dataclass, field
from functools import partial
from typing import Dict, FrozenSet, List, Optional, Pattern, Tuple


# Discount/sale related keywords
DISCOUNT_KEYWORDS = (
    "تخفیف",      # discount
    "discount",
    "sale",
    "offer",
    "تخفیفات",    # discounts
    "فروش",       # sale
    "پیشنهاد",    # offer
)

# ISP/telecom sender names (exact match, case-insensitive)
ISP_SENDERS = (
    "HAMRAH AVAL",
    "RIGHTEL",
    "RIGHTEL+",
    "RighTel",
    "IRANCELL",
    "irancell",
    "Irancell",
    "Aptel",
    "HamraheMan",
    "SamanTel",
    "HAMRAHAVAL",
)

# OTP/verification code keywords. Punctuation is part of the keyword.
OTP_KEYWORDS = (
    "code:",
    ":کد تایید",          # ": verification code"
    "رمز:",               # "password:"
    "verification code",
    "کد تایید",           # verification code
    "رمز یکبار مصرف",     # one-time password
    "OTP",
    "PIN",
)

# Banking keywords, matched against both sender name and message body
BANKING_KEYWORDS = (
    "Bank Mellat",
    "Bank Melli",
    "بانک ملت",
    "بانک ملی",
    "Parsian Bank",
    "بانک پارسیان",
    "Bank Tejarat",
    "بانک تجارت",
    "Bank Saderat",
    "بانک صادرات",
    "Bank Pasargad",
    "بانک پاسارگاد",
    "Saman Bank",
    "بانک سامان",
    "Eghtesad Novin",
    "اقتصاد نوین",
)

# Known banking phone numbers (exact match)
BANKING_PHONE_NUMBERS = frozenset([
    "09999987641",
])

# Known promotional sender numbers (exact match)
PROMOTIONAL_SENDERS = frozenset()

# Short codes are 4-6 digits
SHORT_CODE_MIN_DIGITS = 4
SHORT_CODE_MAX_DIGITS = 6

# Editable table groups (MessageFilters attribute names)
FILTER_GROUPS = (
    "discount_keywords",
    "otp_keywords",
    "banking_keywords",
    "isp_senders",
    "promotional_senders",
    "banking_phone_numbers",
)


def compile_short_code_pattern(
    min_digits: int = SHORT_CODE_MIN_DIGITS,
    max_digits: int = SHORT_CODE_MAX_DIGITS,
) -> Pattern:
    """
    Compile the short-code sender pattern.

    Only ASCII digits are accepted; use with fullmatch().

    Args:
        min_digits: Minimum number of digits
        max_digits: Maximum number of digits

    Returns:
        Compiled regex pattern

    Raises:
        ValueError: If the bounds are not 1 <= min_digits <= max_digits
    """
    if min_digits < 1 or max_digits < min_digits:
        raise ValueError(
            f"Invalid short code bounds: min_digits={min_digits}, max_digits={max_digits}"
        )

    return re.compile(r"[0-9]{%d,%d}" % (min_digits, max_digits))


def _fold(value: Optional[str]) -> str:
    # None behaves like an empty string
    return (value or "").casefold()


def _matching(keywords: Tuple[str, ...], folded: Tuple[str, ...], text: Optional[str]) -> List[str]:
    text_folded = _fold(text)
    if not text_folded:
        return []

    return [
        keyword
        for keyword, keyword_folded in zip(keywords, folded)
        if keyword_folded in text_folded
    ]


def _contains_any(folded: Tuple[str, ...], text: Optional[str]) -> bool:
    text_folded = _fold(text)
    if not text_folded:
        return False

    return any(keyword in text_folded for keyword in folded)


@dataclass(frozen=True)
class MessageFilters:
    """
    Immutable set of filter tables plus the predicates evaluated against them.

    Keyword/sender lists are stored as tuples and phone numbers as
    frozensets. Casefolded copies of the keyword lists and the short code
    pattern are computed once at construction; to change a table, build a
    new instance with with_keyword().
    """
    discount_keywords: Tuple[str, ...] = DISCOUNT_KEYWORDS
    otp_keywords: Tuple[str, ...] = OTP_KEYWORDS
    banking_keywords: Tuple[str, ...] = BANKING_KEYWORDS
    isp_senders: Tuple[str, ...] = ISP_SENDERS
    promotional_senders: FrozenSet[str] = PROMOTIONAL_SENDERS
    banking_phone_numbers: FrozenSet[str] = BANKING_PHONE_NUMBERS
    short_code_min_digits: int = SHORT_CODE_MIN_DIGITS
    short_code_max_digits: int = SHORT_CODE_MAX_DIGITS

    # Derived matchers
    short_code_pattern: Pattern = field(init=False, repr=False, compare=False)
    _discount_folded: Tuple[str, ...] = field(init=False, repr=False, compare=False)
    _otp_folded: Tuple[str, ...] = field(init=False, repr=False, compare=False)
    _banking_folded: Tuple[str, ...] = field(init=False, repr=False, compare=False)
    _isp_folded: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Normalize tables and build matchers (fields are frozen)
        set_ = partial(object.__setattr__, self)

        # Accept any iterable (lists from YAML, generators)
        set_("discount_keywords", tuple(self.discount_keywords))
        set_("otp_keywords", tuple(self.otp_keywords))
        set_("banking_keywords", tuple(self.banking_keywords))
        set_("isp_senders", tuple(self.isp_senders))
        set_("promotional_senders", frozenset(self.promotional_senders))
        set_("banking_phone_numbers", frozenset(self.banking_phone_numbers))

        set_(
            "short_code_pattern",
            compile_short_code_pattern(self.short_code_min_digits, self.short_code_max_digits),
        )
        set_("_discount_folded", tuple(k.casefold() for k in self.discount_keywords))
        set_("_otp_folded", tuple(k.casefold() for k in self.otp_keywords))
        set_("_banking_folded", tuple(k.casefold() for k in self.banking_keywords))
        set_("_isp_folded", frozenset(s.casefold() for s in self.isp_senders))

    def contains_discount_keywords(self, body: Optional[str]) -> bool:
        """Check if a message body contains any discount keyword."""
        return _contains_any(self._discount_folded, body)

    def is_promotional_sender(self, phone_number: Optional[str]) -> bool:
        """
        Check if a sender number is promotional.

        A number is promotional when it is a known promotional sender or a
        short code (the whole string is 4-6 ASCII digits by default).
        """
        phone_number = phone_number or ""

        if phone_number in self.promotional_senders:
            return True

        return self.short_code_pattern.fullmatch(phone_number) is not None

    def is_from_isp(self, sender_name: Optional[str]) -> bool:
        """Check if a sender name equals (ignoring case) a known ISP/telecom name."""
        return _fold(sender_name) in self._isp_folded

    def contains_otp_keywords(self, body: Optional[str]) -> bool:
        """Check if a message body contains any OTP/verification keyword."""
        return _contains_any(self._otp_folded, body)

    def is_from_bank(
        self,
        sender_name: Optional[str],
        phone_number: Optional[str] = "",
        body: Optional[str] = "",
    ) -> bool:
        """
        Check if a message comes from a bank.

        Any of these is enough:
        - sender name contains a banking keyword
        - phone number is a known banking number (exact match)
        - message body contains a banking keyword

        Args:
            sender_name: Sender display name
            phone_number: Sender phone number ("" if unknown)
            body: Message text ("" if unknown)

        Returns:
            True if any banking check matches
        """
        if _contains_any(self._banking_folded, sender_name):
            return True

        if (phone_number or "") in self.banking_phone_numbers:
            return True

        return _contains_any(self._banking_folded, body)

    def matched_discount_keywords(self, body: Optional[str]) -> List[str]:
        """Return discount keywords found in body, in table order."""
        return _matching(self.discount_keywords, self._discount_folded, body)

    def matched_otp_keywords(self, body: Optional[str]) -> List[str]:
        """Return OTP keywords found in body, in table order."""
        return _matching(self.otp_keywords, self._otp_folded, body)

    def matched_banking_keywords(self, text: Optional[str]) -> List[str]:
        """Return banking keywords found in text (sender name or body), in table order."""
        return _matching(self.banking_keywords, self._banking_folded, text)

    def get_keyword_groups(self) -> Dict[str, List[str]]:
        """
        Get a copy of all tables for reference/tuning.

        Returns:
            Dict mapping group names to lists of entries
        """
        groups = {}
        for group_name in FILTER_GROUPS:
            value = getattr(self, group_name)
            groups[group_name] = sorted(value) if isinstance(value, frozenset) else list(value)

        return groups

    def with_keyword(self, group_name: str, keyword: str) -> "MessageFilters":
        """
        Return a new instance with keyword appended to a group.

        Args:
            group_name: Name of table group (see FILTER_GROUPS)
            keyword: Entry to add

        Returns:
            New MessageFilters with matchers rebuilt

        Raises:
            ValueError: If group not found or keyword is empty
        """
        if group_name not in FILTER_GROUPS:
            raise ValueError(f"Unknown filter group: {group_name}")

        if not isinstance(keyword, str) or not keyword:
            raise ValueError("Keyword must be a non-empty string")

        tables = {name: getattr(self, name) for name in FILTER_GROUPS}
        current = tables[group_name]

        if isinstance(current, frozenset):
            tables[group_name] = current | {keyword}
        else:
            tables[group_name] = current + (keyword,)

        return MessageFilters(
            short_code_min_digits=self.short_code_min_digits,
            short_code_max_digits=self.short_code_max_digits,
            **tables,
        )


# Process-wide default, built from the constants above
_default_filters = MessageFilters()


def get_default_filters() -> MessageFilters:
    """Get the filters used by the module-level predicates."""
    return _default_filters


def set_default_filters(filters: MessageFilters) -> None:
    """
    Replace the filters used by the module-level predicates.

    Args:
        filters: New MessageFilters instance

    Raises:
        TypeError: If filters is not a MessageFilters
    """
    global _default_filters

    if not isinstance(filters, MessageFilters):
        raise TypeError(f"Expected MessageFilters, got {type(filters).__name__}")

    _default_filters = filters


def reset_default_filters() -> None:
    """Restore the built-in tables."""
    set_default_filters(MessageFilters())


def contains_discount_keywords(body: Optional[str]) -> bool:
    """Check the default filters for discount keywords in body."""
    return _default_filters.contains_discount_keywords(body)


def is_promotional_sender(phone_number: Optional[str]) -> bool:
    """Check the default filters for a promotional or short-code sender."""
    return _default_filters.is_promotional_sender(phone_number)


def is_from_isp(sender_name: Optional[str]) -> bool:
    """Check the default filters for an ISP/telecom sender name."""
    return _default_filters.is_from_isp(sender_name)


def contains_otp_keywords(body: Optional[str]) -> bool:
    """Check the default filters for OTP/verification keywords in body."""
    return _default_filters.contains_otp_keywords(body)


def is_from_bank(
    sender_name: Optional[str],
    phone_number: Optional[str] = "",
    body: Optional[str] = "",
) -> bool:
    """Check the default filters for a banking sender name, number or body."""
    return _default_filters.is_from_bank(sender_name, phone_number, body)


def get_keyword_groups() -> Dict[str, List[str]]:
    """
    Get all tables of the default filters for reference/tuning.

    Returns:
        Dict mapping group names to lists of entries
    """
    return _default_filters.get_keyword_groups()


def add_keyword(group_name: str, keyword: str) -> bool:
    """
    Add an entry to a group of the default filters (for runtime tuning).

    The default instance is replaced, so matchers are rebuilt.

    Args:
        group_name: Name of table group
        keyword: Entry to add

    Returns:
        True if added, False if group not found or keyword empty
    """
    try:
        filters = _default_filters.with_keyword(group_name, keyword)
    except ValueError:
        return False

    set_default_filters(filters)
    return True
