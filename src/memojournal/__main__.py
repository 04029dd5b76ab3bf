"""Entry point: python -m memojournal [sync|serve|locate <memo id>]

- No args / "sync": One sync pass, exit 1 if any memo failed
- "serve":          Daemon mode (periodic sync)
- "locate":         List journal files containing a memo's block
"""

from __future__ import annotations

import asyncio
import logging
import sys

from memojournal.config import load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _run_sync() -> int:
    """Single pass."""
    config = load_config()
    _setup_logging(config.log_level)

    from memojournal.daemon import run_once
    from memojournal.errors import MemoJournalError

    try:
        report = asyncio.run(run_once(config))
    except (MemoJournalError, ValueError) as e:
        logging.getLogger("memojournal").error("Sync failed: %s", e)
        return 1
    for memo_id, error in report.failures:
        print(f"FAILED {memo_id}: {error}", file=sys.stderr)
    return 0 if report.ok else 1


def _run_serve() -> int:
    """Daemon mode."""
    config = load_config()
    _setup_logging(config.log_level)

    from memojournal.daemon import SyncDaemon

    daemon = SyncDaemon(config)
    asyncio.run(daemon.run())
    return 0


def _run_locate(memo_id: str) -> int:
    config = load_config()
    _setup_logging(config.log_level)

    from memojournal.journal.scan import locate_memo
    from memojournal.journal.vault import LocalVault

    vault = LocalVault(config.journal.sync_dir)
    paths = asyncio.run(locate_memo(vault, memo_id))
    for path in paths:
        print(config.journal.sync_dir / path)
    return 0 if paths else 1


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "sync"

    if cmd == "sync":
        sys.exit(_run_sync())
    elif cmd == "serve":
        sys.exit(_run_serve())
    elif cmd == "locate" and len(sys.argv) > 2:
        sys.exit(_run_locate(sys.argv[2]))
    else:
        print("Usage: python -m memojournal [sync|serve|locate <memo id>]")
        print("  sync    — One sync pass (default)")
        print("  serve   — Daemon mode, sync every interval")
        print("  locate  — Print journal files containing a memo")
        sys.exit(1)


if __name__ == "__main__":
    main()
