"""
CLI entrypoint for SMS Filters.

Provides command-line interface for checking and batch-classifying messages
and for administering the filter tables.
"""

import sys
import os
import argparse
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from smsfilters.config import (
    load_filters,
    save_filters,
    build_filters,
    filters_to_dict,
    load_message_filters,
)
from smsfilters.filters import (
    MessageFilters,
    MessageClassifier,
    FILTER_GROUPS,
    CATEGORIES,
    read_messages_csv,
)


def resolve_filters_path(args) -> str:
    """Filters path from --filters, else SMSFILTERS_CONFIG, else None."""
    return args.filters or os.getenv("SMSFILTERS_CONFIG") or None


def load_filters_for_command(args) -> MessageFilters:
    """
    Load the filter tables a command should use.

    Raises:
        FileNotFoundError, ValueError, yaml.YAMLError: From config loading
    """
    path = resolve_filters_path(args)

    if not path:
        return MessageFilters()

    filters = load_message_filters(path)
    print(f"[OK] Loaded filters from: {path}")
    return filters


def check_command(args) -> int:
    """
    Execute the check command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        filters = load_filters_for_command(args)
    except Exception as e:
        print(f"[ERROR] Failed to load filters: {e}")
        return 1

    classifier = MessageClassifier(filters)
    result = classifier.classify_message(args.sender, args.phone, args.body)

    print("\n" + "=" * 60)
    print("MESSAGE CHECK")
    print("=" * 60)

    print(f"\nSender: {args.sender}")
    if args.phone:
        print(f"Phone: {args.phone}")

    print(f"\nDiscount: {result.is_discount}")
    print(f"Promotional sender: {result.is_promotional_sender}")
    print(f"ISP: {result.is_isp}")
    print(f"OTP: {result.is_otp}")
    print(f"Bank: {result.is_bank}")

    categories = ", ".join(result.categories) or "none"
    print(f"\nCategories: {categories}")

    matched = result.metadata["matched_keywords"]
    for category, keywords in matched.items():
        if keywords:
            print(f"   Matched {category}: {', '.join(keywords)}")

    return 0


def classify_command(args) -> int:
    """
    Execute the classify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        filters = load_filters_for_command(args)
    except Exception as e:
        print(f"[ERROR] Failed to load filters: {e}")
        return 1

    try:
        messages = read_messages_csv(args.input)
        print(f"[OK] Loaded {len(messages)} message(s) from: {args.input}")
    except Exception as e:
        print(f"[ERROR] Failed to read messages: {e}")
        return 1

    classifier = MessageClassifier(filters)

    try:
        print(f"\n[INFO] Starting classification (dry-run={args.dry_run})")

        results, rows = classifier.classify_batch(
            messages,
            limit=args.limit,
            only_category=args.only,
        )

        # Print summary
        print("\n" + "=" * 60)
        print("CLASSIFICATION SUMMARY")
        print("=" * 60)

        print(f"\nProcessed: {results['processed']}")
        for category in CATEGORIES:
            print(f"[OK] {category.capitalize()}: {results[category]}")
        print(f"[INFO] Uncategorized: {results['uncategorized']}")
        print(f"[FAIL] Errors: {results['errors']}")

        if args.dry_run:
            print("\n[DRY-RUN] Skipping CSV export")
        else:
            csv_path = classifier.export_results_to_csv(rows, args.output_dir)
            if csv_path:
                print(f"[OK] Exported to: {csv_path}")

        return 0

    except KeyboardInterrupt:
        print("\n\n[INTERRUPTED] Classification cancelled by user")
        return 130

    except Exception as e:
        print(f"\n[ERROR] Classification failed: {e}")
        return 1


def show_filters_command(args) -> int:
    """
    Execute the show-filters command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        filters = load_filters_for_command(args)
    except Exception as e:
        print(f"[ERROR] Failed to load filters: {e}")
        return 1

    print("\n" + "=" * 60)
    print("FILTER TABLES")
    print("=" * 60)

    for group, entries in filters.get_keyword_groups().items():
        print(f"\n{group} ({len(entries)}):")
        for entry in entries:
            print(f"   - {entry}")

    print(
        f"\nshort_code: {filters.short_code_min_digits}-{filters.short_code_max_digits} digits"
    )

    return 0


def add_keyword_command(args) -> int:
    """
    Execute the add-keyword command.

    Appends an entry to a filter group and writes the YAML back.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    path = resolve_filters_path(args)

    if not path:
        print("[ERROR] No filters file given (use --filters or set SMSFILTERS_CONFIG)")
        return 1

    try:
        if os.path.exists(path):
            data = load_filters(path)
            filters = build_filters(data)
            print(f"[OK] Loaded filters from: {path}")
        else:
            print(f"[INFO] {path} not found, starting from built-in filters")
            data = {}
            filters = MessageFilters()

        updated = filters.with_keyword(args.group, args.keyword)
    except Exception as e:
        print(f"[ERROR] Failed to add keyword: {e}")
        return 1

    before = len(filters.get_keyword_groups()[args.group])
    after = len(updated.get_keyword_groups()[args.group])
    print(f"[INFO] {args.group}: {before} -> {after} entries")

    if args.dry_run:
        print(f"\n[DRY-RUN] YAML not modified: {path}")
        return 0

    try:
        # Keep metadata and any other keys already in the file
        save_filters(path, {**data, **filters_to_dict(updated)})
    except Exception as e:
        print(f"[ERROR] Failed to save filters: {e}")
        return 1

    print(f"\n[SAVE] Updated filters: {path}")
    return 0


def main(argv=None):
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="SMS Filters - Rule-based text message classification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check a single message
  smsfilters check --sender "Bank Mellat" --body "Your verification code: 1234"

  # Classify a CSV dump (dry run)
  smsfilters classify --input data/messages.csv --dry-run

  # Export only OTP messages
  smsfilters classify --input data/messages.csv --only otp

  # Add a custom discount keyword
  smsfilters add-keyword --filters config/message_filters.yaml --group discount_keywords --keyword "حراج"

Environment Variables:
  SMSFILTERS_CONFIG  Path to message_filters.yaml (default: built-in tables)
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_filters_argument(subparser):
        subparser.add_argument(
            "--filters",
            type=str,
            default=None,
            help="Path to message_filters.yaml (default: $SMSFILTERS_CONFIG or built-in tables)",
        )

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Classify a single message",
    )

    check_parser.add_argument(
        "--sender",
        type=str,
        required=True,
        help="Sender display name",
    )

    check_parser.add_argument(
        "--phone",
        type=str,
        default="",
        help="Sender phone number",
    )

    check_parser.add_argument(
        "--body",
        type=str,
        default="",
        help="Message text",
    )

    add_filters_argument(check_parser)

    # classify command
    classify_parser = subparsers.add_parser(
        "classify",
        help="Classify messages from a CSV file",
    )

    classify_parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="CSV file with sender_name, phone_number, body columns",
    )

    classify_parser.add_argument(
        "--output-dir",
        type=str,
        default="data/review",
        help="CSV export directory (default: data/review)",
    )

    classify_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum messages to classify (default: all)",
    )

    classify_parser.add_argument(
        "--only",
        type=str,
        choices=CATEGORIES,
        metavar="CATEGORY",
        help=f"Export only messages in this category ({', '.join(CATEGORIES)})",
    )

    classify_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Classify without writing the CSV export",
    )

    add_filters_argument(classify_parser)

    # show-filters command
    show_parser = subparsers.add_parser(
        "show-filters",
        help="Print the filter tables",
    )

    add_filters_argument(show_parser)

    # add-keyword command
    add_parser = subparsers.add_parser(
        "add-keyword",
        help="Add an entry to a filter group and save the YAML",
    )

    add_parser.add_argument(
        "--group",
        type=str,
        required=True,
        choices=FILTER_GROUPS,
        help="Filter group to extend",
    )

    add_parser.add_argument(
        "--keyword",
        type=str,
        required=True,
        help="Entry to add",
    )

    add_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate without writing YAML",
    )

    add_filters_argument(add_parser)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "check":
        return check_command(args)
    elif args.command == "classify":
        return classify_command(args)
    elif args.command == "show-filters":
        return show_filters_command(args)
    elif args.command == "add-keyword":
        return add_keyword_command(args)
    else:
        print(f"[ERROR] Unknown command: {args.command}")
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
