#!/usr/bin/env python3
"""
Unified CLI for console collection maintenance.

Commands:
  items               - List consoles and accessories with their schedule
  add                 - Add a console or accessory
  delete              - Remove an item and cancel its reminders
  upcoming            - Show maintenance due within 30 days or overdue
  complete            - Record maintenance as done and reschedule reminders
  set-interval        - Configure the maintenance interval of an item
  schedule            - Rebuild reminders for one item or the whole collection
  reminders           - List pending reminder jobs
  deliver             - Deliver reminders whose time has come
  notifications       - View the reminder history
  mark-read           - Mark history entries as read
  clear-notifications - Empty the reminder history
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from console_maint import (
    Accessory,
    CollectionStore,
    Console,
    MaintainableItem,
    MaintenanceError,
    MaintenanceListEntry,
    MaintenanceService,
    NotificationHistory,
    NotificationRecord,
    ReminderScheduler,
    ScheduledJob,
    UpcomingAggregator,
    UpcomingCache,
    YamlDispatcher,
    check_interval,
    load_settings,
    parse_date,
)

logger = logging.getLogger("maint")

# =============================================================================
# Formatting helpers
# =============================================================================


def format_days_remaining(days: int) -> str:
    """Format signed days remaining (e.g. 'in 3d', 'today', '2d overdue')."""
    if days < 0:
        return f"{abs(days)}d overdue"
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    return f"in {days}d"


def format_interval(months: Optional[int]) -> str:
    """Format a maintenance interval for display."""
    if not months:
        return "-"
    return f"{months} mo"


def truncate(text: Optional[str], max_len: int = 40) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


# =============================================================================
# Tables
# =============================================================================


def make_upcoming_table(entries: List[MaintenanceListEntry]) -> List[List[str]]:
    """Convert upcoming entries to table rows."""
    rows = []
    for entry in entries:
        kind = entry.type.value
        if entry.subtype:
            kind = f"{kind} ({entry.subtype})"
        rows.append(
            [
                entry.status.name.replace("_", " "),
                entry.name,
                kind,
                entry.next_maintenance_date,
                format_days_remaining(entry.days_remaining),
                entry.last_maintenance_date or "-",
            ]
        )
    return rows


def make_items_table(items: List[MaintainableItem]) -> List[List[str]]:
    """Convert stored items to table rows."""
    rows = []
    for item in items:
        rows.append(
            [
                item.id,
                item.name,
                item.kind.value,
                item.last_maintenance_date or "-",
                format_interval(item.maintenance_interval_months),
                item.next_maintenance_date or "-",
                "on" if item.notify_maintenance else "off",
            ]
        )
    return rows


def make_notifications_table(records: List[NotificationRecord]) -> List[List[str]]:
    """Convert history records to table rows."""
    return [
        [
            " " if r.read else "*",
            r.created_at,
            r.title,
            truncate(r.body),
            r.maintenance_date or "-",
            r.id,
        ]
        for r in records
    ]


def make_reminders_table(jobs: List[ScheduledJob]) -> List[List[str]]:
    """Convert pending dispatcher jobs to table rows."""
    return [
        [
            job.fires_at.strftime("%d/%m/%Y %H:%M"),
            job.payload.get("title", "-"),
            truncate(job.payload.get("body")),
            job.job_id,
        ]
        for job in jobs
    ]


# =============================================================================
# Wiring
# =============================================================================


def build_service(args, settings) -> MaintenanceService:
    """Create the service for the collection file named on the command line."""
    store = CollectionStore(args.collection_file)
    dispatcher = YamlDispatcher(args.spool or settings.spool_for(args.collection_file))
    history = NotificationHistory(store, limit=settings.history_limit)
    aggregator = UpcomingAggregator(
        UpcomingCache(timedelta(minutes=settings.cache_ttl_minutes))
    )
    scheduler = ReminderScheduler(
        dispatcher, history, reminder_hour=settings.reminder_hour
    )
    return MaintenanceService(store, dispatcher, history, aggregator, scheduler)


def parse_cli_date(text: Optional[str]) -> Optional[datetime]:
    return parse_date(text) if text else None


# =============================================================================
# Commands
# =============================================================================


def cmd_items(service, args):
    """List consoles and accessories with their schedule."""
    items = service.store.get_items()
    if not items:
        print("No items in collection.")
        return 0
    headers = ["ID", "Name", "Kind", "Last", "Interval", "Next", "Notify"]
    print(tabulate(make_items_table(items), headers=headers, tablefmt="simple"))
    return 0


def cmd_upcoming(service, args):
    """Show maintenance due within 30 days or overdue."""
    entries = service.upcoming()
    if not entries:
        print("No maintenance due in the next 30 days.")
        return 0

    overdue = [e for e in entries if e.is_overdue]
    if overdue:
        print(f"OVERDUE: {len(overdue)}")
    headers = ["Status", "Name", "Kind", "Due", "Remaining", "Last Done"]
    print(tabulate(make_upcoming_table(entries), headers=headers, tablefmt="simple"))
    return 0


def cmd_add(service, args):
    """Add a console or accessory."""
    common = dict(
        purchase_date=args.purchased,
        last_maintenance_date=args.last,
        maintenance_interval_months=args.interval,
        notify_maintenance=not args.no_notify,
    )
    if args.last:
        parse_date(args.last)
    if args.kind == "console":
        item = Console(args.name, brand=args.brand, model=args.model, **common)
    else:
        item = Accessory(args.name, subtype=args.type, console_id=args.console, **common)

    item = service.add_item(item)
    print(f"Added {item.kind.value} {item.name} ({item.id})")
    print(f"Next maintenance: {item.next_maintenance_date or '-'}")
    return 0


def cmd_delete(service, args):
    """Remove an item and cancel its reminders."""
    item = service.delete_item(args.item_id)
    print(f"Deleted {item.kind.value} {item.name}")
    return 0


def cmd_complete(service, args):
    """Record maintenance as done and reschedule reminders."""
    item = service.store.get_item(args.item_id)
    when = parse_cli_date(args.date) or datetime.now()

    print(f"Completing maintenance for {item.name} ({item.kind.value}):")
    print(f"  Date: {when.strftime('%d/%m/%Y')}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    item = service.complete_maintenance(args.item_id, when=when)
    print(f"Next maintenance: {item.next_maintenance_date or '-'}")
    return 0


def cmd_set_interval(service, args):
    """Configure the maintenance interval of an item."""
    item = service.store.get_item(args.item_id)
    fields = {"maintenance_interval_months": check_interval(args.months or None)}
    if args.last:
        parse_date(args.last)
        fields["last_maintenance_date"] = args.last

    print(f"Item: {item.name}")
    print(f"Interval: {format_interval(item.maintenance_interval_months)} -> "
          f"{format_interval(args.months)}")
    if args.last:
        print(f"Last maintenance: {item.last_maintenance_date or '-'} -> {args.last}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    item = service.update_item(args.item_id, **fields)
    print(f"Next maintenance: {item.next_maintenance_date or '-'}")
    return 0


def cmd_schedule(service, args):
    """Rebuild reminders for one item or the whole collection."""
    if args.item_id:
        results = {args.item_id: service.schedule_item(args.item_id)}
    else:
        results = service.reschedule_all()
    total = sum(len(ids) for ids in results.values())
    print(f"Scheduled {total} reminder(s) for {len(results)} item(s).")
    return 0


def cmd_reminders(service, args):
    """List pending reminder jobs."""
    jobs = service.dispatcher.list_scheduled()
    if not jobs:
        print("No pending reminders.")
        return 0
    headers = ["Fires At", "Title", "Body", "Job ID"]
    print(tabulate(make_reminders_table(jobs), headers=headers, tablefmt="simple"))
    return 0


def cmd_deliver(service, args):
    """Deliver (print) reminders that are due and remove them from the spool."""
    now = datetime.now()
    if args.dry_run:
        jobs = service.dispatcher.due_jobs(now)
    else:
        jobs = service.dispatcher.pop_due(now)
    if not jobs:
        print("No reminders due.")
        return 0
    for job in jobs:
        logger.info("Delivering reminder %s for item %s", job.job_id, job.item_id)
    headers = ["Fires At", "Title", "Body", "Job ID"]
    print(tabulate(make_reminders_table(jobs), headers=headers, tablefmt="simple"))
    if args.dry_run:
        print()
        print("(dry run - no changes made)")
    return 0


def cmd_notifications(service, args):
    """View the reminder history."""
    records = service.history.all()
    if args.unread:
        records = [r for r in records if not r.read]
    print(f"Unread: {service.history.count_unread()}")
    print()
    if not records:
        print("No notifications.")
        return 0
    headers = ["", "Created", "Title", "Body", "Due", "ID"]
    print(tabulate(make_notifications_table(records), headers=headers, tablefmt="simple"))
    return 0


def cmd_mark_read(service, args):
    """Mark history entries as read."""
    if args.all:
        service.history.mark_all_read()
        print("All notifications marked as read.")
        return 0
    if not args.notification_id:
        print("Error: give a notification ID or --all")
        return 1
    if service.history.mark_read(args.notification_id):
        print("Notification marked as read.")
    else:
        print(f"No notification with ID {args.notification_id}")
    return 0


def cmd_clear_notifications(service, args):
    """Empty the reminder history."""
    service.history.clear()
    print("Notification history cleared.")
    return 0


COMMANDS = {
    "items": cmd_items,
    "upcoming": cmd_upcoming,
    "add": cmd_add,
    "delete": cmd_delete,
    "complete": cmd_complete,
    "set-interval": cmd_set_interval,
    "schedule": cmd_schedule,
    "reminders": cmd_reminders,
    "deliver": cmd_deliver,
    "notifications": cmd_notifications,
    "mark-read": cmd_mark_read,
    "clear-notifications": cmd_clear_notifications,
}


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Console collection maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s collection.yaml upcoming
  %(prog)s collection.yaml items
  %(prog)s collection.yaml complete 3f2a9c --date 15/06/2024
  %(prog)s collection.yaml set-interval 3f2a9c 6 --last 01/01/2024
  %(prog)s collection.yaml schedule
  %(prog)s collection.yaml notifications --unread
  %(prog)s collection.yaml mark-read --all
""",
    )
    parser.add_argument(
        "collection_file",
        type=Path,
        help="Path to collection YAML file",
    )
    parser.add_argument(
        "--spool",
        type=Path,
        help="Reminder spool file (default: <collection>.reminders.yaml)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Settings YAML file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("items", help="List consoles and accessories")
    subparsers.add_parser(
        "upcoming", help="Show maintenance due within 30 days or overdue"
    )

    add_parser = subparsers.add_parser("add", help="Add a console or accessory")
    add_parser.add_argument("kind", choices=["console", "accessory"], help="Item kind")
    add_parser.add_argument("name", type=str, help="Display name")
    add_parser.add_argument("--brand", type=str, help="Console brand")
    add_parser.add_argument("--model", type=str, help="Console model")
    add_parser.add_argument(
        "--type", type=str, help="Accessory type (e.g. 'controller')"
    )
    add_parser.add_argument("--console", type=str, help="Owning console ID")
    add_parser.add_argument(
        "--purchased", type=str, help="Purchase date in DD/MM/YYYY format"
    )
    add_parser.add_argument(
        "--last", type=str, help="Last maintenance date in DD/MM/YYYY format"
    )
    add_parser.add_argument(
        "--interval", type=int, help="Maintenance interval in months"
    )
    add_parser.add_argument(
        "--no-notify", action="store_true", help="Do not schedule reminders"
    )

    delete_parser = subparsers.add_parser("delete", help="Remove an item")
    delete_parser.add_argument("item_id", type=str, help="Item ID")

    complete_parser = subparsers.add_parser(
        "complete", help="Record maintenance as done"
    )
    complete_parser.add_argument("item_id", type=str, help="Item ID")
    complete_parser.add_argument(
        "--date",
        type=str,
        help="Maintenance date in DD/MM/YYYY format (default: today)",
    )
    complete_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be changed without saving",
    )

    interval_parser = subparsers.add_parser(
        "set-interval", help="Configure the maintenance interval of an item"
    )
    interval_parser.add_argument("item_id", type=str, help="Item ID")
    interval_parser.add_argument(
        "months",
        type=int,
        help="Interval in months (0 disables recurring maintenance)",
    )
    interval_parser.add_argument(
        "--last",
        type=str,
        help="Last maintenance date in DD/MM/YYYY format",
    )
    interval_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be changed without saving",
    )

    schedule_parser = subparsers.add_parser(
        "schedule", help="Rebuild reminders for one item or all items"
    )
    schedule_parser.add_argument("item_id", type=str, nargs="?", help="Item ID")

    subparsers.add_parser("reminders", help="List pending reminder jobs")

    deliver_parser = subparsers.add_parser(
        "deliver", help="Deliver reminders whose time has come"
    )
    deliver_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show due reminders without removing them",
    )

    notifications_parser = subparsers.add_parser(
        "notifications", help="View the reminder history"
    )
    notifications_parser.add_argument(
        "--unread", action="store_true", help="Only show unread entries"
    )

    mark_read_parser = subparsers.add_parser(
        "mark-read", help="Mark history entries as read"
    )
    mark_read_parser.add_argument(
        "notification_id", type=str, nargs="?", help="Notification ID"
    )
    mark_read_parser.add_argument(
        "--all", action="store_true", help="Mark every entry as read"
    )

    subparsers.add_parser("clear-notifications", help="Empty the reminder history")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except MaintenanceError as exc:
        print(f"Error: {exc}")
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    service = build_service(args, settings)
    try:
        return COMMANDS[args.command](service, args)
    except (MaintenanceError, ValueError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
