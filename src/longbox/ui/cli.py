# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from longbox.adapters.sources import (
    parse_source_bundle,
    parse_source_document,
    policy_from_document,
    policy_to_document,
)
from longbox.app import (
    active_policy,
    attach_metadata,
    clear_field_override,
    comic_conflicts,
    import_comic,
    list_comics,
    preview_comic,
    resolve_comics,
    set_field_override,
    show_comic,
    store_policy,
)
from longbox.config import configure_logging
from longbox.domain.model import ItemQuery

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from longbox.domain.model import CatalogItem, ItemPage

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve canonical comic metadata")
    parser.add_argument(
        "--policy-name",
        type=str,
        help="Stored resolution policy to use (defaults to LONGBOX_POLICY_NAME or 'default')",
    )
    parser.add_argument("--debug", action="store_true", help="Log resolution decisions")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Import an item from a source bundle")
    import_cmd.add_argument("bundle", type=str, help="JSON file with source documents, or -")

    attach = subparsers.add_parser("attach", help="Attach or replace one source document")
    attach.add_argument("item_id", type=str)
    attach.add_argument("document", type=str, help="JSON file with one source document, or -")

    show = subparsers.add_parser("show", help="Print a stored item without rebuilding it")
    show.add_argument("item_id", type=str)

    listing = subparsers.add_parser("list", help="List stored items, newest first")
    listing.add_argument("--search", type=str, help="Substring of the canonical title or series")
    listing.add_argument("--series", type=str)
    listing.add_argument("--publisher", type=str)
    listing.add_argument("--min-completeness", type=float, dest="min_completeness")
    listing.add_argument("--limit", type=int, default=10)
    listing.add_argument("--page", type=int, default=1)

    resolve = subparsers.add_parser("resolve", help="Rebuild canonical metadata")
    resolve.add_argument("item_ids", type=str, nargs="+")
    resolve.add_argument(
        "--recompute",
        type=str,
        action="append",
        default=[],
        help="Re-resolve a user-overridden field (single item only, repeatable)",
    )

    preview = subparsers.add_parser("preview", help="Show the record a policy would build")
    preview.add_argument("item_id", type=str)
    preview.add_argument(
        "--policy-file",
        type=str,
        help="JSON policy document to preview instead of the stored policy",
    )

    conflicts = subparsers.add_parser("conflicts", help="List conflicting candidates")
    conflicts.add_argument("item_id", type=str)
    conflicts.add_argument("--field", type=str, action="append", dest="fields")

    override = subparsers.add_parser("override", help="Manage user overrides")
    override_sub = override.add_subparsers(dest="override_command", required=True)
    override_set = override_sub.add_parser("set", help="Pin a field to a value")
    override_set.add_argument("item_id", type=str)
    override_set.add_argument("field", type=str)
    override_set.add_argument("value", type=str, help="JSON value (bare text is taken as a string)")
    override_clear = override_sub.add_parser("clear", help="Release a pinned field")
    override_clear.add_argument("item_id", type=str)
    override_clear.add_argument("field", type=str)

    policy = subparsers.add_parser("policy", help="Show or store the resolution policy")
    policy_sub = policy.add_subparsers(dest="policy_command", required=True)
    policy_sub.add_parser("show", help="Print the active policy document")
    policy_set = policy_sub.add_parser("set", help="Store a policy document")
    policy_set.add_argument("document", type=str, help="JSON policy document file, or -")

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _read_json(location: str) -> Any:
    if location == "-":
        return json.load(sys.stdin)
    with Path(location).open(encoding="utf-8") as handle:
        return json.load(handle)


def _parse_value(raw: str) -> object:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _item_document(item: CatalogItem) -> dict[str, object]:
    return {
        "id": str(item.id),
        "version": item.version,
        "sources": [source.value for source in item.sources.sources],
        "record": item.record.to_document(),
    }


def _page_document(page: ItemPage) -> dict[str, object]:
    return {
        "items": [_item_document(item) for item in page.items],
        "totalCount": page.total,
        "pageInfo": {
            "hasNextPage": page.has_next_page,
            "hasPreviousPage": page.has_previous_page,
            "currentPage": page.page,
            "totalPages": page.total_pages,
        },
    }


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _run(args: argparse.Namespace) -> None:  # noqa: C901, PLR0912, PLR0915
    policy_name: str | None = args.policy_name
    if args.command == "import":
        result = import_comic(parse_source_bundle(_read_json(args.bundle)), policy_name=policy_name)
        _emit({**_item_document(result.item), "canonicalResolved": result.canonical_resolved})
    elif args.command == "attach":
        result = attach_metadata(
            _parse_uuid(args.item_id),
            parse_source_document(_read_json(args.document)),
            policy_name=policy_name,
        )
        _emit({**_item_document(result.item), "canonicalResolved": result.canonical_resolved})
    elif args.command == "show":
        _emit(_item_document(show_comic(_parse_uuid(args.item_id))))
    elif args.command == "list":
        query = ItemQuery(
            search=args.search,
            series=args.series,
            publisher=args.publisher,
            min_completeness=args.min_completeness,
            limit=args.limit,
            page=args.page,
        )
        _emit(_page_document(list_comics(query)))
    elif args.command == "resolve":
        items = resolve_comics(
            [_parse_uuid(value) for value in args.item_ids],
            recompute=args.recompute,
            policy_name=policy_name,
        )
        _emit([_item_document(item) for item in items])
    elif args.command == "preview":
        policy = policy_from_document(_read_json(args.policy_file)) if args.policy_file else None
        record = preview_comic(_parse_uuid(args.item_id), policy=policy, policy_name=policy_name)
        _emit(record.to_document())
    elif args.command == "conflicts":
        found = comic_conflicts(_parse_uuid(args.item_id), args.fields, policy_name=policy_name)
        _emit([conflict.to_document() for conflict in found])
    elif args.command == "override" and args.override_command == "set":
        outcome = set_field_override(
            _parse_uuid(args.item_id), args.field, _parse_value(args.value)
        )
        _emit(outcome.record.to_document())
    elif args.command == "override" and args.override_command == "clear":
        outcome = clear_field_override(
            _parse_uuid(args.item_id), args.field, policy_name=policy_name
        )
        _emit(outcome.record.to_document())
    elif args.command == "policy" and args.policy_command == "show":
        _emit(policy_to_document(active_policy(name=policy_name)))
    elif args.command == "policy" and args.policy_command == "set":
        stored_as = store_policy(
            policy_from_document(_read_json(args.document)), name=policy_name
        )
        log.info("Stored resolution policy %r", stored_as)
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.debug else logging.INFO)

    try:
        _run(parsed_args)
    except ValueError:
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
