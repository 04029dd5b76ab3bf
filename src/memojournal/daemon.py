"""Daemon process — periodic sync for always-on hosts.

Usage: python -m memojournal serve

Manages:
- PID file (prevent duplicate instances)
- Sync loop (one pass every `daemon.interval` seconds)
- Graceful shutdown (SIGTERM/SIGINT)
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys

from memojournal.config import JournalAppConfig, load_config
from memojournal.errors import MemoJournalError
from memojournal.journal.vault import LocalVault
from memojournal.source.memos_api import MemosAPIClient
from memojournal.sync import MemoSync, SyncReport

logger = logging.getLogger(__name__)


def build_client(config: JournalAppConfig) -> MemosAPIClient:
    return MemosAPIClient(
        config.memos.base_url,
        config.memos.access_token,
        page_size=config.memos.page_size,
        timeout=config.memos.timeout,
        logger=logging.getLogger("memojournal.source.memos_api"),
    )


async def run_once(config: JournalAppConfig) -> SyncReport:
    """Run a single sync pass against the configured server and journal."""
    async with build_client(config) as client:
        sync = MemoSync(config.journal, client, LocalVault(config.journal.sync_dir))
        return await sync.run()


class SyncDaemon:
    """Always-on daemon process."""

    def __init__(self, config: JournalAppConfig | None = None) -> None:
        self.config = config or load_config()
        self._shutdown_event = asyncio.Event()

    # ── PID file management ──────────────────────────────────

    def _write_pid(self) -> None:
        self.config.pid_file.parent.mkdir(parents=True, exist_ok=True)
        self.config.pid_file.write_text(str(os.getpid()))
        logger.info("PID file written: %s (pid=%d)", self.config.pid_file, os.getpid())

    def _remove_pid(self) -> None:
        if self.config.pid_file.exists():
            self.config.pid_file.unlink()

    def _check_existing(self) -> None:
        if not self.config.pid_file.exists():
            return
        try:
            pid = int(self.config.pid_file.read_text().strip())
            os.kill(pid, 0)
        except (ProcessLookupError, ValueError):
            logger.info("Removing stale PID file %s", self.config.pid_file)
            self._remove_pid()
            return
        except PermissionError:
            pass  # alive, owned by another user
        print(f"memojournal daemon already running (pid={pid}). Exiting.", file=sys.stderr)
        sys.exit(1)

    # ── Signal handling ──────────────────────────────────────

    def _setup_signals(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._handle_signal, sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down...", sig.name)
        self._shutdown_event.set()

    # ── Sync loop ────────────────────────────────────────────

    async def _sync_pass(self) -> None:
        try:
            await run_once(self.config)
        except (MemoJournalError, ValueError) as e:
            logger.error("Sync pass failed: %s", e)

    async def loop(self, shutdown_event: asyncio.Event) -> None:
        """Sync immediately, then every interval until shutdown_event is set."""
        interval = self.config.daemon.interval
        logger.info("Sync loop started (interval=%ds)", interval)
        while not shutdown_event.is_set():
            await self._sync_pass()
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
                break  # shutdown requested
            except asyncio.TimeoutError:
                pass  # interval elapsed — sync again
        logger.info("Sync loop stopped.")

    async def run(self) -> None:
        self._check_existing()
        self._write_pid()
        self._setup_signals()

        logger.info("memojournal daemon starting (journal=%s)", self.config.journal.sync_dir)
        try:
            await self.loop(self._shutdown_event)
        except asyncio.CancelledError:
            pass
        finally:
            self._remove_pid()
            logger.info("memojournal daemon stopped.")
