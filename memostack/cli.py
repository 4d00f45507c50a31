#!/usr/bin/env python3
"""memostack CLI entrypoint."""

import sys
import argparse
import logging

from memostack.lib.config import get_data_dir, get_database_path, load_config
from memostack.lib.types import MemoStatus
from memostack.storage import InMemoryStorage, SqliteStorage, StorageError
from memostack.workflow.lifecycle import LifecycleManager
from memostack.workflow.scheduler import DelayedPromotionScheduler
from memostack.commands import add as cmd_add_module
from memostack.commands import list as cmd_list_module
from memostack.commands import move as cmd_move_module
from memostack.commands import reorder as cmd_reorder_module
from memostack.commands import edit as cmd_edit_module
from memostack.commands import tick as cmd_tick_module

logger = logging.getLogger(__name__)


def open_manager(args) -> LifecycleManager:
    """Load config and storage, reconcile state, and promote due delayed memos.

    Exits with code 2 if storage can't be opened.
    """
    data_dir = get_data_dir(args.data_dir)
    config = load_config(data_dir)

    try:
        if args.ephemeral:
            storage = InMemoryStorage()
        else:
            storage = SqliteStorage(get_database_path(data_dir))
        manager = LifecycleManager(storage, config)
        manager.load()
    except StorageError as e:
        print(f"ERROR: Cannot open memo storage: {e}")
        sys.exit(2)

    # Every invocation is a polling tick; `tick` reports its own promotions
    if args.command != "tick":
        try:
            DelayedPromotionScheduler(manager).tick()
        except StorageError as e:
            logger.error(f"Delayed promotion not saved: {e}")

    return manager


def cmd_add(args):
    return cmd_add_module.cmd_add(args, open_manager(args))


def cmd_list(args):
    return cmd_list_module.cmd_list(args, open_manager(args))


def cmd_archive(args):
    return cmd_move_module.cmd_archive(args, open_manager(args))


def cmd_done(args):
    return cmd_move_module.cmd_done(args, open_manager(args))


def cmd_hot(args):
    return cmd_move_module.cmd_hot(args, open_manager(args))


def cmd_delete(args):
    return cmd_move_module.cmd_delete(args, open_manager(args))


def cmd_up(args):
    return cmd_reorder_module.cmd_up(args, open_manager(args))


def cmd_top(args):
    return cmd_reorder_module.cmd_top(args, open_manager(args))


def cmd_edit(args):
    return cmd_edit_module.cmd_edit(args, open_manager(args))


def cmd_tick(args):
    return cmd_tick_module.cmd_tick(args, open_manager(args))


def cmd_spotlight(args):
    return cmd_tick_module.cmd_spotlight(args, open_manager(args))


def cmd_ui(args):
    # Textual is only imported when the UI is requested
    from memostack.commands import ui as cmd_ui_module
    return cmd_ui_module.cmd_ui(args, open_manager(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='memostack', description='Memo triage stack')
    parser.add_argument('--data-dir', '-D', help='Data directory (default: ~/.local/share/memo-stack)')
    parser.add_argument('--ephemeral', action='store_true', help='Use throwaway in-memory storage')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # memostack add
    p_add = subparsers.add_parser('add', help='Capture a memo (hot, or delayed with --delay)')
    p_add.add_argument('text', nargs='+', help='Memo title')
    p_add.add_argument('--body', '-b', help='Memo body')
    p_add.add_argument('--delay', '-d', help='Delay as HH:MM before the memo turns hot')
    p_add.set_defaults(func=cmd_add)

    # memostack list
    p_list = subparsers.add_parser('list', help='List memos')
    p_list.add_argument('--status', '-s', default='hot', choices=[s.value for s in MemoStatus],
                        help='Lane to list (default: hot)')
    p_list.add_argument('--search', '-q', help='Case-insensitive substring filter')
    p_list.set_defaults(func=cmd_list)

    # memostack archive / done / hot / delete
    p_archive = subparsers.add_parser('archive', help='Move memo to cold')
    p_archive.add_argument('id', type=int, help='Memo ID')
    p_archive.set_defaults(func=cmd_archive)

    p_done = subparsers.add_parser('done', help='Mark memo done')
    p_done.add_argument('id', type=int, help='Memo ID')
    p_done.set_defaults(func=cmd_done)

    p_hot = subparsers.add_parser('hot', help='Move memo to the top of the hot stack')
    p_hot.add_argument('id', type=int, help='Memo ID')
    p_hot.set_defaults(func=cmd_hot)

    p_delete = subparsers.add_parser('delete', help='Permanently delete memo')
    p_delete.add_argument('id', type=int, help='Memo ID')
    p_delete.add_argument('--yes', '-y', action='store_true', help='Skip confirmation')
    p_delete.set_defaults(func=cmd_delete)

    # memostack up / top
    p_up = subparsers.add_parser('up', help='Swap hot memo with the one above it')
    p_up.add_argument('id', type=int, help='Memo ID')
    p_up.set_defaults(func=cmd_up)

    p_top = subparsers.add_parser('top', help='Move hot memo to the top without eviction')
    p_top.add_argument('id', type=int, help='Memo ID')
    p_top.set_defaults(func=cmd_top)

    # memostack edit
    p_edit = subparsers.add_parser('edit', help='Print memo text for re-editing and delete it')
    p_edit.add_argument('id', type=int, help='Memo ID')
    p_edit.add_argument('--draft', help='Unsaved text to capture as a new memo first')
    p_edit.set_defaults(func=cmd_edit)

    # memostack tick / spotlight
    p_tick = subparsers.add_parser('tick', help='Promote due delayed memos')
    p_tick.set_defaults(func=cmd_tick)

    p_spotlight = subparsers.add_parser('spotlight', help='Show a random cold memo')
    p_spotlight.set_defaults(func=cmd_spotlight)

    # memostack ui
    p_ui = subparsers.add_parser('ui', help='Interactive memo stack')
    p_ui.set_defaults(func=cmd_ui)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
