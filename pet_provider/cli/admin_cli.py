"""
Admin CLI for the pet provider.

Usage:
    pet-admin [options] query [--uri <uri>] [--columns name,breed] [--where <sql>] [--arg <v>]... [--order <sql>]
    pet-admin [options] type [--uri <uri>]
    pet-admin [options] insert --name <name> --gender <gender> [--breed <breed>] [--weight <n>]
    pet-admin [options] update [--uri <uri>] [--name ...] [--gender ...] [--breed ...] [--weight ...] [--clear <field>]... [--where <sql>] [--arg <v>]...
    pet-admin [options] delete [--uri <uri>] [--where <sql>] [--arg <v>]...

Gender accepts a code (0, 1, 2) or a name (unknown, male, female).
"""

import argparse
import json
import sys
from typing import Any

from pet_provider.config import load_settings
from pet_provider.contract import CONTENT_URI
from pet_provider.core.errors import GatewayError
from pet_provider.core.models import Gender
from pet_provider.observability.logger import get_logger, setup_logger
from pet_provider.provider import PetProvider
from pet_provider.store import create_store

logger = get_logger(__name__)

FIELD_NAMES = ("name", "breed", "gender", "weight")


def parse_gender(value: str) -> int:
    """Parse a gender code or name for the command line."""
    if value.strip().lstrip("-").isdigit():
        return int(value)
    try:
        return Gender[value.strip().upper()].value
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"invalid gender {value!r}; use one of: "
            + ", ".join(g.name.lower() for g in Gender)
        )


def _field_values(args) -> dict[str, Any]:
    """Collect the pet fields given on the command line."""
    values = {}
    for field_name in FIELD_NAMES:
        value = getattr(args, field_name, None)
        if value is not None:
            values[field_name] = value
    # --clear sets a field to null
    for field_name in getattr(args, "clear", None) or ():
        values[field_name] = None
    return values


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def query_command(provider: PetProvider, args) -> None:
    columns = [c.strip() for c in args.columns.split(",")] if args.columns else None
    with provider.query(args.uri, columns, args.where, args.arg, args.order) as result:
        _print_json(result.fetchall())


def type_command(provider: PetProvider, args) -> None:
    print(provider.get_type(args.uri))


def insert_command(provider: PetProvider, args) -> int:
    new_uri = provider.insert(args.uri, _field_values(args))
    if new_uri is None:
        print("Error: the store did not accept the new pet", file=sys.stderr)
        return 1
    print(new_uri)
    return 0


def update_command(provider: PetProvider, args) -> None:
    count = provider.update(args.uri, _field_values(args), args.where, args.arg)
    _print_json({"updated": count})


def delete_command(provider: PetProvider, args) -> None:
    count = provider.delete(args.uri, args.where, args.arg)
    _print_json({"deleted": count})


def _add_field_options(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required, help="Pet name")
    parser.add_argument("--breed", help="Pet breed")
    parser.add_argument(
        "--gender", type=parse_gender, required=required,
        help="Gender code or name (unknown, male, female)"
    )
    parser.add_argument("--weight", type=int, help="Weight in whole units")


def _add_selection_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--where", help="Selection with ? placeholders (ignored for item URIs)")
    parser.add_argument(
        "--arg", action="append", default=None,
        help="Selection argument, repeat once per placeholder"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pet-admin",
        description="Admin CLI for the pet provider",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Global store options; unset options fall back to the environment
    parser.add_argument("--backend", choices=["sqlite", "postgres"], help="Store backend")
    parser.add_argument("--db-path", help="SQLite database file")
    parser.add_argument("--log-level", help="Log level (default: LOG_LEVEL or INFO)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    query_parser = subparsers.add_parser("query", help="List pets")
    query_parser.add_argument("--uri", default=CONTENT_URI, help="Collection or item URI")
    query_parser.add_argument("--columns", help="Comma-separated columns (default: all)")
    _add_selection_options(query_parser)
    query_parser.add_argument("--order", help="Sort order, e.g. 'name ASC'")

    type_parser = subparsers.add_parser("type", help="Show the type token of a URI")
    type_parser.add_argument("--uri", default=CONTENT_URI, help="Collection or item URI")

    insert_parser = subparsers.add_parser("insert", help="Add a pet")
    insert_parser.add_argument("--uri", default=CONTENT_URI, help="Collection URI")
    _add_field_options(insert_parser, required=True)

    update_parser = subparsers.add_parser("update", help="Change pets")
    update_parser.add_argument("--uri", default=CONTENT_URI, help="Collection or item URI")
    _add_field_options(update_parser, required=False)
    update_parser.add_argument(
        "--clear", action="append", choices=FIELD_NAMES, metavar="FIELD",
        help="Set a field to null, repeat for more fields (name and gender are rejected)"
    )
    _add_selection_options(update_parser)

    delete_parser = subparsers.add_parser("delete", help="Remove pets")
    delete_parser.add_argument("--uri", default=CONTENT_URI, help="Collection or item URI")
    _add_selection_options(delete_parser)

    return parser


COMMANDS = {
    "query": query_command,
    "type": type_command,
    "insert": insert_command,
    "update": update_command,
    "delete": delete_command,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the admin CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = load_settings(
        backend=args.backend,
        sqlite_path=args.db_path,
        log_level=args.log_level.upper() if args.log_level else None,
    )
    setup_logger(level=settings.log_level, format_type=settings.log_format)

    provider = PetProvider(store_factory=lambda: create_store(settings))
    try:
        with provider:
            status = COMMANDS[args.command](provider, args)
    except GatewayError as e:
        logger.debug("Command failed", extra={"command": args.command, "error_message": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130

    return status or 0


if __name__ == "__main__":
    sys.exit(main())
