"""CLI entrypoint for VocabCards.

Usage:
  python study.py topics
  python study.py words oxford-3000/animals --only-new
  python study.py know oxford-3000/animals cat
  python study.py export backup.json
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .app import AppContext
from .config import SettingsManager
from .errors import BackupImportError, LookupMiss
from .models import VocabEntry
from .services.transfer import default_backup_filename, read_backup_file, write_backup_file
from .services.views import (
    active_words,
    export_review_csv,
    is_fully_known,
    known_count,
    progress_report,
    review_items,
    topic_total,
    type_summary,
)
from .utils.logger import setup_logger


def build_context(args: argparse.Namespace, settings: SettingsManager) -> AppContext:
    if args.data_dir or args.storage or args.media_dir:
        ctx = AppContext.from_paths(
            args.data_dir or settings.data_dir,
            args.storage or settings.storage_file,
            args.media_dir or str(settings.media_dir),
        )
        ctx.settings = settings
        return ctx
    return AppContext.from_settings(settings)


def _resolve_entry(ctx: AppContext, topic_key: str, word: str) -> Optional[VocabEntry]:
    try:
        ctx.catalog.require_topic(topic_key)
    except LookupMiss:
        print(f"Error: unknown topic '{topic_key}'")
        return None
    entry = ctx.catalog.get_vocab_by_word(topic_key, word)
    if entry is None:
        print(f"Error: '{word}' is not in {topic_key}")
    return entry


def _format_entry(entry: VocabEntry) -> str:
    pos = "/".join(entry.pos_tags)
    parts = [entry.word]
    if pos:
        parts.append(f"({pos})")
    if entry.phonetic:
        parts.append(entry.phonetic)
    if entry.meaning:
        parts.append(f"- {entry.meaning}")
    return " ".join(parts)


def cmd_types(ctx: AppContext, args: argparse.Namespace) -> int:
    for vtype in ctx.catalog.get_type_list():
        summary = type_summary(ctx.catalog, vtype.type_id, ctx.known)
        print(f"{vtype.type_id:<24} {vtype.name}  ({summary['known']}/{summary['total']} known)")
    return 0


def cmd_topics(ctx: AppContext, args: argparse.Namespace) -> int:
    topics = ctx.catalog.get_topic_list(args.type)
    if not topics:
        print("No topics found.")
        return 0
    for meta in topics:
        key = meta.topic_key
        done = known_count(ctx.catalog, key, ctx.known)
        mark = "*" if is_fully_known(ctx.catalog, key, ctx.known) else " "
        print(f"{mark} {key:<36} {meta.name}  {done}/{topic_total(ctx.catalog, key)}")
    return 0


def cmd_words(ctx: AppContext, args: argparse.Namespace) -> int:
    try:
        ctx.catalog.require_topic(args.topic)
    except LookupMiss:
        print(f"Error: unknown topic '{args.topic}'")
        return 1
    words = active_words(ctx.catalog, args.topic, args.only_new, ctx.known, ctx.learn)
    for index, entry in enumerate(words, start=1):
        print(f"{index:>4}. {_format_entry(entry)}")
    if not words:
        print("Nothing left to learn here." if args.only_new else "This topic has no words.")
    return 0


def cmd_know(ctx: AppContext, args: argparse.Namespace) -> int:
    entry = _resolve_entry(ctx, args.topic, args.word)
    if entry is None:
        return 1
    ctx.session.mark_learned(args.topic, entry.word)
    print(f"Marked '{entry.word}' as known.")
    return 0


def cmd_learn(ctx: AppContext, args: argparse.Namespace) -> int:
    entry = _resolve_entry(ctx, args.topic, args.word)
    if entry is None:
        return 1
    if ctx.known.has(args.topic, entry.word):
        print(f"'{entry.word}' is already known.")
        return 0
    if ctx.learn.add(args.topic, entry.word):
        print(f"Added '{entry.word}' to the to-learn list.")
    else:
        print(f"'{entry.word}' is already on the to-learn list.")
    return 0


def cmd_unlearn(ctx: AppContext, args: argparse.Namespace) -> int:
    if ctx.learn.remove(args.topic, args.word):
        print(f"Removed '{args.word}' from the to-learn list.")
    else:
        print(f"'{args.word}' is not on the to-learn list.")
    return 0


def cmd_learned(ctx: AppContext, args: argparse.Namespace) -> int:
    if not ctx.learn.has(args.topic, args.word):
        print(f"Error: '{args.word}' is not on the to-learn list")
        return 1
    ctx.session.mark_learned(args.topic, args.word.strip())
    print(f"Moved '{args.word.strip()}' to known.")
    return 0


def cmd_review(ctx: AppContext, args: argparse.Namespace) -> int:
    items = review_items(ctx.catalog, ctx.learn)
    if not items:
        print("The to-learn list is empty.")
    for item in items:
        meaning = f" - {item.entry.meaning}" if item.entry and item.entry.meaning else ""
        print(f"[{item.topic_name}] {item.record.word}{meaning}")
    if args.csv:
        if not export_review_csv(ctx.catalog, ctx.learn, args.csv):
            print(f"Error: could not write {args.csv}")
            return 1
        print(f"Wrote review list: {args.csv}")
    return 0


def cmd_stats(ctx: AppContext, args: argparse.Namespace) -> int:
    report = progress_report(ctx.catalog, ctx.known, ctx.learn, args.type)
    if report.empty:
        print("No topics found.")
        return 0
    print(report.to_string(index=False))
    print(f"\nKnown: {ctx.known.count}  To learn: {ctx.learn.count}")
    return 0


def cmd_export(ctx: AppContext, args: argparse.Namespace) -> int:
    path = Path(args.path or default_backup_filename())
    try:
        write_backup_file(path, ctx.learn, ctx.known)
    except OSError as e:
        print(f"Error: could not write {path}: {e}")
        return 1
    print(f"Exported {ctx.learn.count} to learn and {ctx.known.count} known to {path}")
    return 0


def cmd_import(ctx: AppContext, args: argparse.Namespace) -> int:
    try:
        text = read_backup_file(args.path)
    except OSError as e:
        print(f"Error: could not read {args.path}: {e}")
        return 1
    except BackupImportError as e:
        print(f"Error: {e.message}")
        return 1
    result = ctx.import_progress(text)
    if not result.ok:
        print(f"Error: {result.message}")
        return 1
    print(result.message)
    return 0


def cmd_clear_learn(ctx: AppContext, args: argparse.Namespace) -> int:
    removed = ctx.learn.count
    ctx.learn.clear()
    print(f"Cleared {removed} words from the to-learn list.")
    return 0


def cmd_theme(ctx: AppContext, args: argparse.Namespace) -> int:
    if args.mode == "toggle":
        ctx.theme.toggle()
    elif args.mode in ("dark", "light"):
        ctx.theme.set_dark(args.mode == "dark")
    print(ctx.theme.name)
    return 0


def cmd_speak(ctx: AppContext, args: argparse.Namespace) -> int:
    speech = ctx.speech
    coro = speech.pronounce_slow(args.word) if args.slow else speech.pronounce(args.word)
    clip = asyncio.run(coro)
    if clip is None:
        print("Error: speech synthesis unavailable")
        return 1
    repeat = f" x{clip.plays} ({clip.pause_ms} ms pause)" if clip.plays > 1 else ""
    print(f"{clip.path}{repeat}")
    return 0


def cmd_image(ctx: AppContext, args: argparse.Namespace) -> int:
    async def lookup() -> str:
        try:
            return await ctx.images.resolve_best(args.word)
        finally:
            await ctx.close()

    url = asyncio.run(lookup()) if args.lookup else ctx.images.resolve(args.word)
    print(url)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="vocabcards", description="Topic flashcards with local progress")
    p.add_argument("--settings", default=None, help="Settings JSON file")
    p.add_argument("--data-dir", default=None, help="Dataset directory (<typeId>/<topicSlug>.json)")
    p.add_argument("--storage", default=None, help="Progress storage JSON file")
    p.add_argument("--media-dir", default=None, help="Speech clip cache directory")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("types", help="List vocabulary types").set_defaults(func=cmd_types)

    p_topics = sub.add_parser("topics", help="List topics with known counts")
    p_topics.add_argument("--type", default=None, help="Only topics of this type id")
    p_topics.set_defaults(func=cmd_topics)

    p_words = sub.add_parser("words", help="Words of a topic in card order")
    p_words.add_argument("topic", help="Topic key, e.g. oxford-3000/animals")
    p_words.add_argument("--only-new", action="store_true", help="Hide known and to-learn words")
    p_words.set_defaults(func=cmd_words)

    for name, func, help_text in (
        ("know", cmd_know, "Mark a word as known"),
        ("learn", cmd_learn, "Add a word to the to-learn list"),
        ("unlearn", cmd_unlearn, "Remove a word from the to-learn list"),
        ("learned", cmd_learned, "Move a to-learn word to known"),
    ):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("topic")
        sp.add_argument("word")
        sp.set_defaults(func=func)

    p_review = sub.add_parser("review", help="Show the to-learn list")
    p_review.add_argument("--csv", default=None, help="Also write it as CSV")
    p_review.set_defaults(func=cmd_review)

    p_stats = sub.add_parser("stats", help="Per-topic progress table")
    p_stats.add_argument("--type", default=None)
    p_stats.set_defaults(func=cmd_stats)

    p_export = sub.add_parser("export", help="Write a progress backup")
    p_export.add_argument("path", nargs="?", default=None)
    p_export.set_defaults(func=cmd_export)

    p_import = sub.add_parser("import", help="Restore a progress backup (replaces lists)")
    p_import.add_argument("path")
    p_import.set_defaults(func=cmd_import)

    sub.add_parser("clear-learn", help="Empty the to-learn list").set_defaults(func=cmd_clear_learn)

    p_theme = sub.add_parser("theme", help="Show or change the theme")
    p_theme.add_argument("mode", nargs="?", choices=["dark", "light", "toggle"], default=None)
    p_theme.set_defaults(func=cmd_theme)

    p_speak = sub.add_parser("speak", help="Synthesize a word's pronunciation")
    p_speak.add_argument("word")
    p_speak.add_argument("--slow", action="store_true", help="Slow, repeated twice")
    p_speak.set_defaults(func=cmd_speak)

    p_image = sub.add_parser("image", help="Image URL for a word")
    p_image.add_argument("word")
    p_image.add_argument("--lookup", action="store_true", help="Query Wikipedia instead of the placeholder")
    p_image.set_defaults(func=cmd_image)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = SettingsManager(args.settings) if args.settings else SettingsManager()
    setup_logger(level=args.log_level or settings.get("LOG_LEVEL", "WARNING"))
    ctx = build_context(args, settings)
    return args.func(ctx, args)


if __name__ == "__main__":
    sys.exit(main())
