"""Tests for configuration loading."""

import pytest
from pathlib import Path

from memojournal.config import AttachmentPolicy, load_config

_ENV_KEYS = [
    "MEMOS_BASE_URL",
    "MEMOS_ACCESS_TOKEN",
    "MEMOS_PAGE_SIZE",
    "MEMOS_TIMEOUT",
    "MEMOJOURNAL_SYNC_DIR",
    "MEMOJOURNAL_ATTACHMENT_POLICY",
    "MEMOJOURNAL_INTERVAL",
    "MEMOJOURNAL_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    def test_defaults(self):
        config = load_config()
        assert config.memos.base_url == ""
        assert config.memos.page_size == 50
        assert config.journal.resource_dir == "resources"
        assert config.journal.attachment_policy is AttachmentPolicy.ABORT
        assert config.journal.image_heading == "图片附件"
        assert config.journal.sync_dir.name == "journal"
        assert config.daemon.interval == 300
        assert config.log_level == "INFO"

    def test_env_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("MEMOS_BASE_URL", "https://memos.example.com/")
        monkeypatch.setenv("MEMOS_TIMEOUT", "5")
        monkeypatch.setenv("MEMOJOURNAL_SYNC_DIR", str(tmp_path / "vault"))
        monkeypatch.setenv("MEMOJOURNAL_ATTACHMENT_POLICY", "best_effort")

        config = load_config()
        assert config.memos.base_url == "https://memos.example.com"
        assert config.memos.timeout == 5
        assert config.journal.sync_dir == tmp_path / "vault"
        assert config.journal.attachment_policy is AttachmentPolicy.BEST_EFFORT

    def test_toml_file(self, tmp_path: Path):
        toml_path = tmp_path / "memojournal.toml"
        toml_path.write_text("""
log_level = "DEBUG"

[memos]
base_url = "http://localhost:5230"
access_token = "tok"
page_size = 20

[journal]
sync_dir = "/tmp/journal"
resource_dir = "assets"
attachment_policy = "best_effort"
file_heading = "Files"

[daemon]
interval = 60
""")
        config = load_config(toml_path)
        assert config.memos.base_url == "http://localhost:5230"
        assert config.memos.access_token == "tok"
        assert config.memos.page_size == 20
        assert config.journal.sync_dir == Path("/tmp/journal")
        assert config.journal.resource_dir == "assets"
        assert config.journal.attachment_policy is AttachmentPolicy.BEST_EFFORT
        assert config.journal.file_heading == "Files"
        assert config.daemon.interval == 60
        assert config.log_level == "DEBUG"

    def test_cwd_toml_discovered(self, tmp_path: Path):
        (tmp_path / "memojournal.toml").write_text('[memos]\nbase_url = "http://found"\n')
        assert load_config().memos.base_url == "http://found"

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("MEMOS_PAGE_SIZE", "5")

        toml_path = tmp_path / "memojournal.toml"
        toml_path.write_text("""
[memos]
page_size = 100
""")
        config = load_config(toml_path)
        assert config.memos.page_size == 5  # env wins

    def test_unknown_policy(self, monkeypatch):
        monkeypatch.setenv("MEMOJOURNAL_ATTACHMENT_POLICY", "sometimes")
        with pytest.raises(ValueError, match="attachment_policy"):
            load_config()
