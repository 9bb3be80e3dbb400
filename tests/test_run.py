"""Tests for the classification orchestrator."""

import csv

import pytest

from smsfilters.filters import MessageClassifier, MessageFilters, add_keyword
from smsfilters.filters.run import (
    FilterResult,
    read_messages_csv,
    mitigate_formula_injection,
)


MESSAGES = [
    {"sender_name": "IRANCELL", "phone_number": "", "body": "50% discount on packages"},
    {"sender_name": "30001", "phone_number": "30001", "body": "hello"},
    {"sender_name": "Friend", "phone_number": "09120000000", "body": "see you tomorrow"},
    {"sender_name": "Bank Melli", "phone_number": "", "body": "رمز: 5521"},
]


def test_classify_message_flags_and_metadata():
    classifier = MessageClassifier()

    result = classifier.classify_message(
        "Bank Mellat", "09999987641", "Your verification code: 1234"
    )

    assert isinstance(result, FilterResult)
    assert result.is_otp
    assert result.is_bank
    assert not result.is_discount
    assert not result.is_isp
    assert not result.is_promotional_sender
    assert result.categories == ["otp", "bank"]
    assert result.metadata["matched_keywords"]["otp"] == ["code:", "verification code"]
    assert result.metadata["matched_keywords"]["bank"] == ["Bank Mellat"]
    assert result.metadata["bank_phone_match"] is True


def test_classify_message_defaults():
    result = MessageClassifier().classify_message("Random Co")

    assert result.categories == []
    assert result.metadata["matched_keywords"] == {"discount": [], "otp": [], "bank": []}


def test_banking_matches_are_not_duplicated():
    result = MessageClassifier().classify_message(
        "Saman Bank", "", "Saman Bank: بانک سامان"
    )

    assert result.metadata["matched_keywords"]["bank"] == ["Saman Bank", "بانک سامان"]


def test_classifier_uses_current_default_filters():
    add_keyword("isp_senders", "MCI")

    assert MessageClassifier().classify_message("mci").is_isp


def test_classifier_with_custom_filters():
    classifier = MessageClassifier(MessageFilters(discount_keywords=["rebate"]))

    assert classifier.classify_message("Shop", "", "big REBATE").is_discount
    assert not classifier.classify_message("Shop", "", "big sale").is_discount


def test_to_row():
    result = MessageClassifier().classify_message("IRANCELL", "", "offer")

    assert result.to_row() == {
        "is_discount": 1,
        "is_promotional_sender": 0,
        "is_isp": 1,
        "is_otp": 0,
        "is_bank": 0,
        "categories": "discount, isp",
    }


def test_classify_batch_counters():
    classifier = MessageClassifier()

    results, rows = classifier.classify_batch(MESSAGES)

    assert results["processed"] == 4
    assert results["discount"] == 1
    assert results["promotional"] == 1
    assert results["isp"] == 1
    assert results["otp"] == 1
    assert results["bank"] == 1
    assert results["uncategorized"] == 1
    assert results["errors"] == 0
    assert len(rows) == 4
    assert classifier.results is results


def test_classify_batch_only_category_and_limit():
    classifier = MessageClassifier()

    _, rows = classifier.classify_batch(MESSAGES, only_category="otp")
    assert [row["sender_name"] for row in rows] == ["Bank Melli"]

    results, rows = classifier.classify_batch(MESSAGES, limit=2)
    assert results["processed"] == 2
    assert len(rows) == 2


def test_classify_batch_unknown_category():
    with pytest.raises(ValueError):
        MessageClassifier().classify_batch(MESSAGES, only_category="spam")


def test_classify_batch_counts_errors():
    messages = MESSAGES + [{"sender_name": "x", "phone_number": "", "body": 12345}]

    results, rows = MessageClassifier().classify_batch(messages)

    assert results["errors"] == 1
    assert results["processed"] == 4
    assert len(rows) == 4


def test_export_results_to_csv(tmp_path):
    classifier = MessageClassifier()
    messages = MESSAGES + [
        {"sender_name": "=HYPERLINK(x)", "phone_number": "+98912", "body": "line1\nsale"},
    ]
    _, rows = classifier.classify_batch(messages)

    csv_path = classifier.export_results_to_csv(rows, str(tmp_path / "out"))

    with open(csv_path, newline="", encoding="utf-8") as f:
        exported = list(csv.DictReader(f))

    assert len(exported) == 5
    assert exported[0]["categories"] == "discount, isp"
    assert exported[3]["snippet"] == "رمز: 5521"
    assert exported[4]["sender_name"] == "'=HYPERLINK(x)"
    assert exported[4]["phone_number"] == "'+98912"
    assert exported[4]["snippet"] == "line1 sale"


def test_export_truncates_snippet(tmp_path):
    classifier = MessageClassifier()
    _, rows = classifier.classify_batch(
        [{"sender_name": "a", "phone_number": "", "body": "x" * 500}]
    )

    csv_path = classifier.export_results_to_csv(rows, str(tmp_path))

    with open(csv_path, newline="", encoding="utf-8") as f:
        exported = list(csv.DictReader(f))

    assert len(exported[0]["snippet"]) == 200


def test_export_nothing(tmp_path):
    assert MessageClassifier().export_results_to_csv([], str(tmp_path)) is None


def test_read_messages_csv(tmp_path):
    path = tmp_path / "messages.csv"
    path.write_text("sender_name,body\nIRANCELL,offer\nFriend,\n", encoding="utf-8")

    messages = read_messages_csv(str(path))

    assert messages == [
        {"sender_name": "IRANCELL", "phone_number": "", "body": "offer"},
        {"sender_name": "Friend", "phone_number": "", "body": ""},
    ]


def test_read_messages_csv_requires_sender_column(tmp_path):
    path = tmp_path / "messages.csv"
    path.write_text("from,body\nx,y\n", encoding="utf-8")

    with pytest.raises(ValueError):
        read_messages_csv(str(path))


def test_read_messages_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_messages_csv(str(tmp_path / "missing.csv"))


@pytest.mark.parametrize("value, expected", [
    ("=SUM(A1)", "'=SUM(A1)"),
    ("+98912", "'+98912"),
    ("-5", "'-5"),
    ("@cmd", "'@cmd"),
    ("hello", "hello"),
    ("", ""),
])
def test_mitigate_formula_injection(value, expected):
    assert mitigate_formula_injection(value) == expected
