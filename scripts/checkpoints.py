#!/usr/bin/env python3
"""
Command-line utility for inspecting a durable checkpoint directory and
memory snapshot files.
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from cortex.core.errors import CortexError
from cortex.state.store import StateStore
from cortex.vector.semantic_memory import SemanticMemory


def _format_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts).isoformat(timespec="seconds")


def cmd_list(args) -> int:
    store = StateStore(persist_dir=args.state_dir)
    ids = store.list_persisted()
    if not ids:
        print(f"No checkpoints in {args.state_dir}")
        return 0

    rows = []
    for checkpoint_id in ids:
        try:
            record = store.load(checkpoint_id)
        except CortexError as e:
            print(f"  {checkpoint_id}  <unreadable: {e}>")
            continue
        rows.append(record)

    rows.sort(key=lambda r: r.created_at)
    print(f"Found {len(ids)} checkpoint(s) in {args.state_dir}")
    for record in rows:
        print(f"  {record.id}  {_format_ts(record.created_at)}  "
              f"name={record.name or '-'}  messages={len(record.messages)}  "
              f"memories={len(record.memory.entries)}")
    return 0


def cmd_show(args) -> int:
    store = StateStore(persist_dir=args.state_dir)
    try:
        record = store.load(args.checkpoint_id)
    except CortexError as e:
        print(f"ERROR: {e}")
        return 1

    print("Checkpoint Information:")
    print(f"  ID: {record.id}")
    print(f"  Name: {record.name or '-'}")
    print(f"  Created: {_format_ts(record.created_at)}")
    print(f"  Engine: {record.engine_state.engine_id} ({record.engine_state.n_tokens} tokens, "
          f"{len(record.engine_state.data)} bytes)")
    print(f"  Memory: {len(record.memory.entries)}/{record.memory.max_entries} entries, "
          f"dim={record.memory.embedding_dim}")
    print(f"  Messages: {len(record.messages)}")
    if args.verbose:
        for message in record.messages:
            content = message.content[:70] + "..." if len(message.content) > 70 else message.content
            print(f"    [{message.role.value}] {content}")
        for entry in record.memory.entries:
            print(f"    <{entry.key}> {entry.content[:70]}")
    return 0


def cmd_delete(args) -> int:
    store = StateStore(persist_dir=args.state_dir)
    if args.checkpoint_id not in store.list_persisted():
        print(f"ERROR: Checkpoint not found: {args.checkpoint_id}")
        return 1
    store.delete(args.checkpoint_id)
    print(f"Deleted checkpoint {args.checkpoint_id}")
    return 0


def cmd_memory(args) -> int:
    try:
        memory = SemanticMemory.load(args.memory_file)
    except CortexError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Memory snapshot: {args.memory_file}")
    print(f"  Entries: {len(memory)}/{memory.max_entries}")
    print(f"  Dimension: {memory.embedding_dim}")
    if args.verbose:
        for entry in memory.entries():
            print(f"    <{entry.key}> {entry.content[:70]}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect checkpoint directories and memory snapshots",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list ./data/state
  %(prog)s show ./data/state 3f2c... --verbose
  %(prog)s delete ./data/state 3f2c...
  %(prog)s memory ./data/sessions/user_123/memory.bin
        """
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List checkpoints on disk")
    p_list.add_argument("state_dir", type=Path)
    p_list.set_defaults(func=cmd_list)

    p_show = sub.add_parser("show", help="Show one checkpoint")
    p_show.add_argument("state_dir", type=Path)
    p_show.add_argument("checkpoint_id")
    p_show.add_argument("--verbose", "-v", action="store_true", help="Include messages and memories")
    p_show.set_defaults(func=cmd_show)

    p_delete = sub.add_parser("delete", help="Delete a checkpoint file")
    p_delete.add_argument("state_dir", type=Path)
    p_delete.add_argument("checkpoint_id")
    p_delete.set_defaults(func=cmd_delete)

    p_memory = sub.add_parser("memory", help="Inspect a memory snapshot file")
    p_memory.add_argument("memory_file", type=Path)
    p_memory.add_argument("--verbose", "-v", action="store_true", help="List entries")
    p_memory.set_defaults(func=cmd_memory)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
