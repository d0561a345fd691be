"""
Mailpit CLI - Command-line interface for a Mailpit server.

This layer provides the user-facing commands, using the SDK layer for all
operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- Pretty formatting for human output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Any

import structlog

from mailpit_client import __version__
from mailpit_client.core.errors import MailpitError, ValidationError
from mailpit_client.core.types import MessageInfo
from mailpit_client.sdk import MailpitClient

# =============================================================================
# Output Helpers
# =============================================================================


HUMAN_LIMIT = 20  # Default limit for human-readable output


def configure_logging(verbose: bool = False) -> None:
    """Send structlog output to stderr, at DEBUG when verbose else WARNING."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: MailpitError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def message_row(message: MessageInfo) -> dict[str, Any]:
    """Flatten a message list entry for JSON output."""
    return {
        "id": message.id,
        "from": str(message.from_) if message.from_ else None,
        "to": [str(a) for a in message.to],
        "subject": message.subject,
        "created": message.created.isoformat() if message.created else None,
        "read": message.read,
        "tags": message.tags,
        "attachments": message.attachments,
        "size": message.size,
    }


def print_messages(messages: list[MessageInfo], total: int, has_more: bool) -> None:
    if not messages:
        print("No messages found.")
        return

    table_output(
        ["ID", "From", "Subject", "Received"],
        [
            [
                m.id,
                m.from_.address if m.from_ else "",
                m.subject,
                m.created.strftime("%Y-%m-%d %H:%M") if m.created else "",
            ]
            for m in messages
        ],
        [22, 28, 40, 16],
    )

    if has_more:
        print(f"\nShowing {len(messages)} of {total} messages")


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_info(client: MailpitClient, args: argparse.Namespace) -> None:
    """Show server information."""
    try:
        info = client.application.info()

        if is_tty():
            print(f"Version: {info.version}")
            if info.update_available:
                print(f"Latest version: {info.latest_version}")
            print(f"Messages: {info.messages} ({info.unread} unread)")
            print(f"Database: {info.database} ({info.database_size} bytes)")
            print(f"Uptime: {info.runtime_stats.uptime}s")
            if info.tags:
                print("\nTags:")
                for tag, count in sorted(info.tags.items()):
                    print(f"  {tag}: {count}")
        else:
            success_output(asdict(info))
    except MailpitError as e:
        error_output(e)


def cmd_messages_list(client: MailpitClient, args: argparse.Namespace) -> None:
    """List messages."""
    try:
        limit = args.limit
        if limit is None and is_tty():
            limit = HUMAN_LIMIT
        summary = client.messages.list(start=args.start, limit=limit)

        if is_tty():
            print_messages(summary.messages, summary.messages_count, summary.has_more)
        else:
            success_output(
                {
                    "data": [message_row(m) for m in summary.messages],
                    "total_count": summary.messages_count,
                    "unread": summary.messages_unread,
                    "start": summary.start,
                }
            )
    except MailpitError as e:
        error_output(e)


def cmd_messages_search(client: MailpitClient, args: argparse.Namespace) -> None:
    """Search messages."""
    try:
        limit = args.limit
        if limit is None and is_tty():
            limit = HUMAN_LIMIT
        summary = client.messages.search(args.query, start=args.start, limit=limit, tz=args.tz)

        if is_tty():
            print_messages(summary.messages, summary.messages_count, summary.has_more)
        else:
            success_output(
                {
                    "data": [message_row(m) for m in summary.messages],
                    "total_count": summary.messages_count,
                    "start": summary.start,
                }
            )
    except MailpitError as e:
        error_output(e)


def cmd_messages_delete(client: MailpitClient, args: argparse.Namespace) -> None:
    """Delete messages by ID, or all of them with --all."""
    try:
        if not args.ids and not args.all:
            raise ValidationError("Pass message IDs, or --all to delete every message")
        if args.ids and args.all:
            raise ValidationError("Message IDs and --all are mutually exclusive")

        ok = client.messages.delete_all() if args.all else client.messages.delete(args.ids)
        success_output({"success": ok})
    except MailpitError as e:
        error_output(e)


def cmd_messages_read(client: MailpitClient, args: argparse.Namespace) -> None:
    """Mark messages read (or unread)."""
    try:
        ok = client.messages.set_read_status(
            read=not args.unread,
            ids=args.ids or None,
            search=args.search,
            tz=args.tz,
        )
        success_output({"success": ok})
    except MailpitError as e:
        error_output(e)


def cmd_message_get(client: MailpitClient, args: argparse.Namespace) -> None:
    """Show a message."""
    try:
        message = client.message.get(args.message_id)

        if is_tty():
            print(f"ID: {message.id}")
            print(f"From: {message.from_ or ''}")
            print(f"To: {', '.join(str(a) for a in message.to)}")
            if message.cc:
                print(f"Cc: {', '.join(str(a) for a in message.cc)}")
            print(f"Subject: {message.subject}")
            if message.date:
                print(f"Date: {message.date.isoformat()}")
            if message.tags:
                print(f"Tags: {', '.join(message.tags)}")
            for attachment in message.attachments:
                print(f"Attachment: {attachment.file_name} ({attachment.content_type}, {attachment.size} bytes)")
            print()
            print(message.text)
        else:
            data = asdict(message)
            data.update(data.pop("base"))
            success_output(data)
    except MailpitError as e:
        error_output(e)


def cmd_message_source(client: MailpitClient, args: argparse.Namespace) -> None:
    """Print the raw message source."""
    try:
        sys.stdout.write(client.message.source(args.message_id))
    except MailpitError as e:
        error_output(e)


def cmd_message_headers(client: MailpitClient, args: argparse.Namespace) -> None:
    """Show the message headers."""
    try:
        headers = client.message.headers(args.message_id)

        if is_tty():
            for name, values in headers.items():
                for value in values:
                    print(f"{name}: {value}")
        else:
            success_output(headers)
    except MailpitError as e:
        error_output(e)


def cmd_tags_list(client: MailpitClient, args: argparse.Namespace) -> None:
    """List tags."""
    try:
        tags = client.tags.list()

        if is_tty():
            if not tags:
                print("No tags found.")
                return
            for tag in tags:
                print(tag)
        else:
            success_output({"data": tags})
    except MailpitError as e:
        error_output(e)


def cmd_tags_set(client: MailpitClient, args: argparse.Namespace) -> None:
    """Overwrite the tags of messages."""
    try:
        success_output({"success": client.tags.set(args.ids, args.tags or [])})
    except MailpitError as e:
        error_output(e)


def cmd_tags_rename(client: MailpitClient, args: argparse.Namespace) -> None:
    """Rename a tag."""
    try:
        success_output({"success": client.tags.rename(args.tag, args.name)})
    except MailpitError as e:
        error_output(e)


def cmd_tags_delete(client: MailpitClient, args: argparse.Namespace) -> None:
    """Delete a tag."""
    try:
        success_output({"success": client.tags.delete(args.tag)})
    except MailpitError as e:
        error_output(e)


def cmd_check_html(client: MailpitClient, args: argparse.Namespace) -> None:
    """Run the HTML compatibility check."""
    try:
        result = client.checks.html(args.message_id)

        if is_tty():
            total = result.total
            print(f"Supported: {total.supported:.1f}%  Partial: {total.partial:.1f}%  Unsupported: {total.unsupported:.1f}%")
            print(f"Tests: {total.tests}  Nodes: {total.nodes}")
            if result.warnings:
                print()
                table_output(
                    ["Slug", "Title", "Found", "Unsupported"],
                    [[w.slug, w.title, str(w.score.found), f"{w.score.unsupported:.1f}%"] for w in result.warnings],
                    [30, 40, 6, 11],
                )
        else:
            success_output(asdict(result))
    except MailpitError as e:
        error_output(e)


def cmd_check_links(client: MailpitClient, args: argparse.Namespace) -> None:
    """Run the link check."""
    try:
        result = client.checks.links(args.message_id, follow=args.follow or None)

        if is_tty():
            if not result.links:
                print("No links found.")
                return
            table_output(
                ["Status", "URL"],
                [[str(link.status_code), link.url] for link in result.links],
                [6, 80],
            )
            print(f"\nErrors: {result.errors}")
        else:
            success_output(asdict(result))
    except MailpitError as e:
        error_output(e)


def cmd_check_spam(client: MailpitClient, args: argparse.Namespace) -> None:
    """Run the SpamAssassin check."""
    try:
        result = client.checks.spam(args.message_id)

        if is_tty():
            if result.error:
                print(f"Error: {result.error}")
                return
            print(f"Spam: {'yes' if result.is_spam else 'no'} (score {result.score})")
            if result.rules:
                print()
                table_output(
                    ["Score", "Rule", "Description"],
                    [[f"{r.score:.1f}", r.name, r.description] for r in result.rules],
                    [6, 30, 60],
                )
        else:
            success_output(asdict(result))
    except MailpitError as e:
        error_output(e)


# =============================================================================
# Argument Parser
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog="mailpit",
        description="Mailpit CLI - inspect and manage a Mailpit server",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--url", help="Mailpit base URL (or MAILPIT_URL env var)")
    parser.add_argument("--username", help="Basic auth username (or MAILPIT_USERNAME env var)")
    parser.add_argument("--password", help="Basic auth password (or MAILPIT_PASSWORD env var)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Info ==========
    info = subparsers.add_parser("info", help="Show server information")
    info.set_defaults(func=cmd_info)

    # ========== Messages ==========
    messages = subparsers.add_parser("messages", help="List, search and manage messages")
    messages.set_defaults(func=lambda _c, _a: messages.print_help())
    messages_sub = messages.add_subparsers(dest="subcommand")

    m_list = messages_sub.add_parser("list", help="List messages")
    m_list.add_argument("--limit", "-l", type=int, help="Max results")
    m_list.add_argument("--start", "-s", type=int, help="Offset for pagination")
    m_list.set_defaults(func=cmd_messages_list)

    m_search = messages_sub.add_parser("search", help="Search messages")
    m_search.add_argument("query", help="Search filter, e.g. 'from:alice is:unread'")
    m_search.add_argument("--limit", "-l", type=int, help="Max results")
    m_search.add_argument("--start", "-s", type=int, help="Offset for pagination")
    m_search.add_argument("--tz", help="Timezone for dates in the query, e.g. Europe/Berlin")
    m_search.set_defaults(func=cmd_messages_search)

    m_delete = messages_sub.add_parser("delete", help="Delete messages")
    m_delete.add_argument("ids", nargs="*", help="Message IDs")
    m_delete.add_argument("--all", action="store_true", help="Delete every message")
    m_delete.set_defaults(func=cmd_messages_delete)

    m_read = messages_sub.add_parser("read", help="Mark messages read (all when no IDs or search)")
    m_read.add_argument("ids", nargs="*", help="Message IDs")
    m_read.add_argument("--unread", action="store_true", help="Mark unread instead")
    m_read.add_argument("--search", help="Update messages matching this search")
    m_read.add_argument("--tz", help="Timezone for dates in the search")
    m_read.set_defaults(func=cmd_messages_read)

    # ========== Message ==========
    message = subparsers.add_parser("message", help="Inspect a single message")
    message.set_defaults(func=lambda _c, _a: message.print_help())
    message_sub = message.add_subparsers(dest="subcommand")

    g_get = message_sub.add_parser("get", help="Show a message (marks it read)")
    g_get.add_argument("message_id", help="Message ID or 'latest'")
    g_get.set_defaults(func=cmd_message_get)

    g_source = message_sub.add_parser("source", help="Print the raw source")
    g_source.add_argument("message_id", help="Message ID or 'latest'")
    g_source.set_defaults(func=cmd_message_source)

    g_headers = message_sub.add_parser("headers", help="Show the headers")
    g_headers.add_argument("message_id", help="Message ID or 'latest'")
    g_headers.set_defaults(func=cmd_message_headers)

    # ========== Tags ==========
    tags = subparsers.add_parser("tags", help="Manage tags")
    tags.set_defaults(func=lambda _c, _a: tags.print_help())
    tags_sub = tags.add_subparsers(dest="subcommand")

    t_list = tags_sub.add_parser("list", help="List tags")
    t_list.set_defaults(func=cmd_tags_list)

    t_set = tags_sub.add_parser("set", help="Overwrite the tags of messages")
    t_set.add_argument("ids", nargs="+", help="Message IDs")
    t_set.add_argument("--tag", "-t", dest="tags", action="append", help="Tag (repeatable; none clears)")
    t_set.set_defaults(func=cmd_tags_set)

    t_rename = tags_sub.add_parser("rename", help="Rename a tag")
    t_rename.add_argument("tag", help="Current name")
    t_rename.add_argument("name", help="New name")
    t_rename.set_defaults(func=cmd_tags_rename)

    t_delete = tags_sub.add_parser("delete", help="Delete a tag (messages are kept)")
    t_delete.add_argument("tag", help="Tag name")
    t_delete.set_defaults(func=cmd_tags_delete)

    # ========== Checks ==========
    check = subparsers.add_parser("check", help="Run message checks")
    check.set_defaults(func=lambda _c, _a: check.print_help())
    check_sub = check.add_subparsers(dest="subcommand")

    c_html = check_sub.add_parser("html", help="HTML compatibility check")
    c_html.add_argument("message_id", help="Message ID or 'latest'")
    c_html.set_defaults(func=cmd_check_html)

    c_links = check_sub.add_parser("links", help="Link check")
    c_links.add_argument("message_id", help="Message ID or 'latest'")
    c_links.add_argument("--follow", action="store_true", help="Follow redirects")
    c_links.set_defaults(func=cmd_check_links)

    c_spam = check_sub.add_parser("spam", help="SpamAssassin check")
    c_spam.add_argument("message_id", help="Message ID or 'latest'")
    c_spam.set_defaults(func=cmd_check_spam)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    configure_logging(args.verbose)

    try:
        client = MailpitClient(base_url=args.url, username=args.username, password=args.password)
    except MailpitError as e:
        error_output(e)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
