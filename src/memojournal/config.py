"""Configuration loading from environment variables and memojournal.toml."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_HOME_DIR = Path.home() / ".memojournal"
_DEFAULT_SYNC_DIR = _HOME_DIR / "journal"
_CONFIG_FILENAME = "memojournal.toml"


class AttachmentPolicy(str, enum.Enum):
    """What to do with a block when one of its attachments fails to download."""

    ABORT = "abort"
    BEST_EFFORT = "best_effort"


@dataclass
class MemosConfig:
    """Connection settings for the Memos server."""

    base_url: str = ""
    access_token: str = ""
    page_size: int = 50
    timeout: int = 30


@dataclass
class JournalConfig:
    """Where and how journal files are written."""

    sync_dir: Path = _DEFAULT_SYNC_DIR
    resource_dir: str = "resources"
    attachment_policy: AttachmentPolicy = AttachmentPolicy.ABORT
    image_heading: str = "图片附件"
    file_heading: str = "其他附件"


@dataclass
class DaemonConfig:
    """Daemon configuration."""

    interval: int = 300


@dataclass
class JournalAppConfig:
    """Top-level memojournal configuration."""

    memos: MemosConfig = field(default_factory=MemosConfig)
    journal: JournalConfig = field(default_factory=JournalConfig)
    daemon: DaemonConfig = field(default_factory=DaemonConfig)
    pid_file: Path = _HOME_DIR / "memojournal.pid"
    log_level: str = "INFO"


def _parse_policy(value: str) -> AttachmentPolicy:
    try:
        return AttachmentPolicy(value.lower())
    except ValueError:
        choices = ", ".join(p.value for p in AttachmentPolicy)
        raise ValueError(f"Unknown attachment_policy '{value}' (expected one of: {choices})")


def load_config(config_path: Path | None = None) -> JournalAppConfig:
    """Load configuration from environment variables and optional memojournal.toml.

    Priority: environment variables > memojournal.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.memojournal/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _HOME_DIR / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    memos_data = file_data.get("memos", {})
    journal_data = file_data.get("journal", {})
    daemon_data = file_data.get("daemon", {})

    sync_dir = os.getenv("MEMOJOURNAL_SYNC_DIR", journal_data.get("sync_dir"))

    config = JournalAppConfig(
        memos=MemosConfig(
            base_url=os.getenv("MEMOS_BASE_URL", memos_data.get("base_url", "")).rstrip("/"),
            access_token=os.getenv("MEMOS_ACCESS_TOKEN", memos_data.get("access_token", "")),
            page_size=int(os.getenv("MEMOS_PAGE_SIZE", memos_data.get("page_size", 50))),
            timeout=int(os.getenv("MEMOS_TIMEOUT", memos_data.get("timeout", 30))),
        ),
        journal=JournalConfig(
            sync_dir=Path(sync_dir).expanduser() if sync_dir else _DEFAULT_SYNC_DIR,
            resource_dir=journal_data.get("resource_dir", "resources"),
            attachment_policy=_parse_policy(
                os.getenv(
                    "MEMOJOURNAL_ATTACHMENT_POLICY",
                    journal_data.get("attachment_policy", AttachmentPolicy.ABORT.value),
                )
            ),
            image_heading=journal_data.get("image_heading", "图片附件"),
            file_heading=journal_data.get("file_heading", "其他附件"),
        ),
        daemon=DaemonConfig(
            interval=int(os.getenv("MEMOJOURNAL_INTERVAL", daemon_data.get("interval", 300))),
        ),
        pid_file=Path(file_data.get("pid_file", str(_HOME_DIR / "memojournal.pid"))).expanduser(),
        log_level=os.getenv("MEMOJOURNAL_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
