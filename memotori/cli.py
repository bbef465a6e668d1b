from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from memotori.capture import note_title, parse_tags, pick_hint, tag_suggestions
from memotori.config import Config
from memotori.data.errors import InitFailed, StorageError
from memotori.data.store import NoteStore
from memotori.paths import AppPaths
from memotori.version import __version__

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 200


def _fail(message: str, status: int = 1) -> int:
    print(f"memo-tori: {message}", file=sys.stderr)
    return status


def cmd_add(store: NoteStore, config: Config, args: argparse.Namespace) -> int:
    content = args.text.strip()
    if not content:
        return _fail("nothing to save", status=2)
    note_id = store.insert_note(content, parse_tags(args.tags))
    logger.info("Saved note %s", note_id)
    print(note_id)
    return 0


def cmd_search(store: NoteStore, config: Config, args: argparse.Namespace) -> int:
    for item in store.search_notes(args.query, parse_tags(args.tags), args.limit):
        print(f"{item.id}\t{note_title(item.preview)}")
    return 0


def cmd_show(store: NoteStore, config: Config, args: argparse.Namespace) -> int:
    content = store.get_note_content(args.note_id)
    if content is None:
        return _fail(f"no note {args.note_id}")
    print(content)
    tags = store.get_note_tags(args.note_id)
    if tags:
        print(f"\ntags: {', '.join(tags)}")
    return 0


def cmd_edit(store: NoteStore, config: Config, args: argparse.Namespace) -> int:
    content = args.text.strip()
    if not content:
        return _fail("nothing to save", status=2)
    if store.get_note_content(args.note_id) is None:
        return _fail(f"no note {args.note_id}")
    store.update_note_content(args.note_id, content)
    logger.info("Updated note %s", args.note_id)
    return 0


def cmd_tag(store: NoteStore, config: Config, args: argparse.Namespace) -> int:
    if store.get_note_content(args.note_id) is None:
        return _fail(f"no note {args.note_id}")
    store.replace_note_tags(args.note_id, parse_tags(args.tags))
    print(", ".join(store.get_note_tags(args.note_id)))
    return 0


def cmd_complete(store: NoteStore, config: Config, args: argparse.Namespace) -> int:
    for suggestion in tag_suggestions(store, args.text):
        print(suggestion)
    return 0


def cmd_hint(store: NoteStore | None, config: Config, args: argparse.Namespace) -> int:
    print(pick_hint(config.capture_hints))
    return 0


def cmd_settings(store: NoteStore | None, config: Config, args: argparse.Namespace) -> int:
    print(json.dumps(config.as_dict(), indent=2, ensure_ascii=False))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("memo-tori", description="Quick note capture")
    parser.add_argument("--version", action="version", version=f"memo-tori {__version__}")
    parser.add_argument("--db", type=Path, help="database file (default: XDG data dir)")
    parser.add_argument("--config", type=Path, help="settings file (default: XDG config dir)")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("add", help="capture a note")
    sp.add_argument("text")
    sp.add_argument("--tags", default="", help="comma-separated tags")
    sp.set_defaults(func=cmd_add)

    sp = sub.add_parser("search", help="search notes")
    sp.add_argument("query", nargs="?", default="")
    sp.add_argument("--tags", default="", help="only notes with all of these tags")
    sp.add_argument("--limit", type=int, default=DEFAULT_SEARCH_LIMIT)
    sp.set_defaults(func=cmd_search)

    sp = sub.add_parser("show", help="print a note and its tags")
    sp.add_argument("note_id")
    sp.set_defaults(func=cmd_show)

    sp = sub.add_parser("edit", help="replace a note's content")
    sp.add_argument("note_id")
    sp.add_argument("text")
    sp.set_defaults(func=cmd_edit)

    sp = sub.add_parser("tag", help="replace a note's tags")
    sp.add_argument("note_id")
    sp.add_argument("tags", help="comma-separated tags")
    sp.set_defaults(func=cmd_tag)

    sp = sub.add_parser("complete", help="suggest tags for partial input")
    sp.add_argument("text")
    sp.set_defaults(func=cmd_complete)

    sp = sub.add_parser("hint", help="print a capture prompt")
    sp.set_defaults(func=cmd_hint, needs_store=False)

    sp = sub.add_parser("settings", help="print effective settings")
    sp.set_defaults(func=cmd_settings, needs_store=False)

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if args.db is None or args.config is None:
        paths = AppPaths.resolve()
        args.db = args.db or paths.db_path
        args.config = args.config or paths.config_path

    config = Config.load_or_create(args.config)
    if not getattr(args, "needs_store", True):
        return args.func(None, config, args)

    try:
        store = NoteStore.open(args.db)
    except InitFailed as exc:
        logger.critical("Cannot start without a database: %s", exc)
        return _fail(str(exc))

    with store:
        try:
            return args.func(store, config, args)
        except StorageError as exc:
            return _fail(str(exc))


if __name__ == "__main__":
    raise SystemExit(main())
