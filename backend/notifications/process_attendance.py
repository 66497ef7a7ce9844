"""
CLI for sending attendance notifications from JSON files.

Usage:
    # Absent alerts for a finalized day ({"records": [...]} or a bare list)
    python -m notifications.process_attendance --batch absentees.json

    # One attendance event
    python -m notifications.process_attendance --single event.json

    # Monthly PDF report ({"studentName", "parentEmail", "reportData"})
    python -m notifications.process_attendance --report report.json

    # Dry run (log instead of sending)
    python -m notifications.process_attendance --batch absentees.json --dry-run
"""

import argparse
import json
import sys
from typing import Any

from notifications.errors import NotifierError
from notifications.mail_channel import SmtpMailChannel
from notifications.service import NotificationService
from shared.config import load_settings
from shared.log_config import configure_logging

CLI_CALLER_ID = "cli"


def _load_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _print_batch_summary(result: dict[str, Any]) -> None:
    print(f"\n{'=' * 60}")
    print("Attendance Batch Complete")
    print(f"{'=' * 60}")
    for row in result["results"]:
        marker = "✓" if row["ok"] else "✗"
        detail = " (dry run)" if row.get("dryRun") else ""
        if not row["ok"]:
            detail = f": {row.get('message', 'failed')}"
        print(f"  {marker} {row.get('studentId', '<unknown>')}{detail}")
    print(f"Sent:     {result['sent']}")
    print(f"Failed:   {result['total'] - result['sent']}")
    print(f"Total:    {result['total']}")


def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.env_file)
    if args.dry_run:
        settings = settings.model_copy(update={"dry_run": True})
    configure_logging(settings.log_level)

    service = NotificationService(settings)
    if isinstance(service.channel, SmtpMailChannel):
        service.channel.verify()

    try:
        if args.batch:
            payload = _load_json(args.batch)
            if isinstance(payload, list):
                payload = {"records": payload}
            result = service.send_absent_batch(payload, CLI_CALLER_ID)
            _print_batch_summary(result)
        elif args.single:
            result = service.send_attendance(_load_json(args.single), CLI_CALLER_ID)
            print(f"✓ Sent{' (dry run)' if result.get('dryRun') else ''}")
        else:
            result = service.send_report(_load_json(args.report), CLI_CALLER_ID)
            print(f"✓ Report sent{' (dry run)' if result.get('dryRun') else ''}")
    except NotifierError as e:
        print(f"✗ {e.message}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"✗ Could not read input: {e}", file=sys.stderr)
        return 1

    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Send attendance notification emails")

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--batch", help="JSON file with records to notify")
    mode.add_argument("--single", help="JSON file with one attendance event")
    mode.add_argument("--report", help="JSON file with monthly report data")

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't actually send emails)",
    )
    parser.add_argument("--env-file", help="Path to a .env file")

    return run(parser.parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
