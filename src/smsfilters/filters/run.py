"""
Classification orchestrator for SMS Filters.

Combines the filter predicates into a per-message result, and handles
batch classification of CSV message dumps and CSV export.
"""

import os
import csv
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

from .rules import MessageFilters, get_default_filters


CLASSIFIER_VERSION = "1.0.0"

# Category names in the order they are reported
CATEGORIES = ("discount", "promotional", "isp", "otp", "bank")

INPUT_COLUMNS = ("sender_name", "phone_number", "body")


@dataclass
class FilterResult:
    """Result of classifying a message."""
    is_discount: bool
    is_promotional_sender: bool
    is_isp: bool
    is_otp: bool
    is_bank: bool
    categories: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_row(self) -> Dict[str, Any]:
        """Flatten to a CSV-friendly dict."""
        return {
            "is_discount": int(self.is_discount),
            "is_promotional_sender": int(self.is_promotional_sender),
            "is_isp": int(self.is_isp),
            "is_otp": int(self.is_otp),
            "is_bank": int(self.is_bank),
            "categories": ", ".join(self.categories),
        }


class MessageClassifier:
    """
    Orchestrates message classification and CSV export.

    Features:
    - Single message classification into a FilterResult
    - Batch classification of a CSV dump (sender_name, phone_number, body)
    - CSV export with formula injection mitigation
    """

    def __init__(self, filters: Optional[MessageFilters] = None):
        """
        Initialize classifier.

        Args:
            filters: Filter tables to use (default: process-wide default filters)
        """
        self.filters = filters if filters is not None else get_default_filters()
        self.results = self._empty_results()

    @staticmethod
    def _empty_results() -> Dict[str, Any]:
        results = {"processed": 0, "uncategorized": 0, "errors": 0}
        for category in CATEGORIES:
            results[category] = 0
        return results

    def classify_message(
        self,
        sender_name: Optional[str],
        phone_number: Optional[str] = "",
        body: Optional[str] = "",
    ) -> FilterResult:
        """
        Classify one message against every filter.

        Args:
            sender_name: Sender display name
            phone_number: Sender phone number ("" if unknown)
            body: Message text ("" if unknown)

        Returns:
            FilterResult with one flag per category and matched keywords
        """
        filters = self.filters

        flags = {
            "discount": filters.contains_discount_keywords(body),
            "promotional": filters.is_promotional_sender(phone_number),
            "isp": filters.is_from_isp(sender_name),
            "otp": filters.contains_otp_keywords(body),
            "bank": filters.is_from_bank(sender_name, phone_number, body),
        }

        banking_matches = filters.matched_banking_keywords(sender_name)
        for keyword in filters.matched_banking_keywords(body):
            if keyword not in banking_matches:
                banking_matches.append(keyword)

        metadata = {
            "classifier_version": CLASSIFIER_VERSION,
            "matched_keywords": {
                "discount": filters.matched_discount_keywords(body),
                "otp": filters.matched_otp_keywords(body),
                "bank": banking_matches,
            },
            "bank_phone_match": (phone_number or "") in filters.banking_phone_numbers,
        }

        return FilterResult(
            is_discount=flags["discount"],
            is_promotional_sender=flags["promotional"],
            is_isp=flags["isp"],
            is_otp=flags["otp"],
            is_bank=flags["bank"],
            categories=[c for c in CATEGORIES if flags[c]],
            metadata=metadata,
        )

    def classify_batch(
        self,
        messages: List[Dict[str, Any]],
        limit: Optional[int] = None,
        only_category: Optional[str] = None,
    ) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
        """
        Classify a batch of messages.

        Args:
            messages: Dicts with sender_name, phone_number and body keys
            limit: Maximum messages to process
            only_category: Keep only messages in this category

        Returns:
            Tuple of (counters, rows) where rows are message dicts merged
            with their result columns

        Raises:
            ValueError: If only_category is not a known category
        """
        if only_category is not None and only_category not in CATEGORIES:
            raise ValueError(
                f"Unknown category: {only_category} (expected one of {', '.join(CATEGORIES)})"
            )

        # Reset results
        self.results = self._empty_results()

        if limit is not None:
            messages = messages[:limit]

        print(f"\n[INFO] Processing {len(messages)} message(s)")

        rows = []
        for idx, msg in enumerate(messages):
            try:
                result = self.classify_message(
                    msg.get("sender_name"),
                    msg.get("phone_number"),
                    msg.get("body"),
                )
            except Exception as e:
                print(f"   [WARN] Error processing message {idx}: {e}")
                self.results["errors"] += 1
                continue

            self.results["processed"] += 1
            for category in result.categories:
                self.results[category] += 1
            if not result.categories:
                self.results["uncategorized"] += 1

            if only_category and only_category not in result.categories:
                continue

            row = {column: msg.get(column) or "" for column in INPUT_COLUMNS}
            row.update(result.to_row())
            rows.append(row)

        return self.results, rows

    def export_results_to_csv(
        self,
        rows: List[Dict[str, Any]],
        export_dir: str,
    ) -> Optional[str]:
        """
        Export classified messages to CSV.

        Args:
            rows: Rows returned by classify_batch()
            export_dir: Directory to write CSV file

        Returns:
            Path to CSV file or None if there is nothing to export
        """
        if not rows:
            print("\n[INFO] No classified messages to export")
            return None

        # Create export directory
        Path(export_dir).mkdir(parents=True, exist_ok=True)

        # Generate CSV filename
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        csv_path = os.path.join(export_dir, f"classified_{timestamp}.csv")

        with open(csv_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL)

            # Header
            writer.writerow([
                "sender_name",
                "phone_number",
                "snippet",
                "is_discount",
                "is_promotional_sender",
                "is_isp",
                "is_otp",
                "is_bank",
                "categories",
            ])

            for row in rows:
                # Truncate and sanitize snippet
                snippet = row["body"].replace("\n", " ").replace("\r", " ")
                snippet = mitigate_formula_injection(snippet[:200])

                writer.writerow([
                    mitigate_formula_injection(row["sender_name"]),
                    mitigate_formula_injection(row["phone_number"]),
                    snippet,
                    row["is_discount"],
                    row["is_promotional_sender"],
                    row["is_isp"],
                    row["is_otp"],
                    row["is_bank"],
                    row["categories"],
                ])

        print(f"\n[EXPORT] Exported {len(rows)} message(s) to: {csv_path}")
        return csv_path


def read_messages_csv(path: str) -> List[Dict[str, str]]:
    """
    Read a CSV message dump.

    The file must have a header row with at least a sender_name column;
    phone_number and body are optional and default to "".

    Args:
        path: Path to CSV file

    Returns:
        List of message dicts

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the sender_name column is missing
    """
    csv_path = Path(path)

    if not csv_path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    with open(csv_path, "r", newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)

        if not reader.fieldnames or "sender_name" not in reader.fieldnames:
            raise ValueError("Missing required 'sender_name' column in input CSV")

        return [
            {column: row.get(column) or "" for column in INPUT_COLUMNS}
            for row in reader
        ]


def mitigate_formula_injection(value: str) -> str:
    """
    Mitigate CSV formula injection by prefixing dangerous cells.

    Excel treats cells starting with =, +, -, @ as formulas.
    Prefix with single quote to treat as text. Phone numbers such as
    "+98..." are affected too.

    Args:
        value: Cell value

    Returns:
        Safe value
    """
    if not value:
        return value

    if value[0] in "=+-@":
        return f"'{value}"

    return value
