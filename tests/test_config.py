"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from coinjar.config import CoinjarConfig

ENV_VARS = (
    "COINJAR_LEDGER",
    "COINJAR_STRICT_CURRENCIES",
    "COINJAR_HISTORY_LIMIT",
    "COINJAR_AMOUNT_COLUMN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))


class TestCoinjarConfig:
    """Tests for CoinjarConfig."""

    def test_defaults(self) -> None:
        """Should fall back to defaults without env or file."""
        config = CoinjarConfig.load()

        assert config == CoinjarConfig()
        assert config.history_limit == 100
        assert config.amount_column == 72

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should read COINJAR_* variables."""
        monkeypatch.setenv("COINJAR_LEDGER", "/tmp/main.coin")
        monkeypatch.setenv("COINJAR_STRICT_CURRENCIES", "yes")
        monkeypatch.setenv("COINJAR_HISTORY_LIMIT", "5")

        config = CoinjarConfig.from_env()

        assert config.ledger_path == Path("/tmp/main.coin")
        assert config.strict_currencies
        assert config.history_limit == 5
        assert config.amount_column == 72

    def test_from_env_requires_a_variable(self) -> None:
        """Should fail when no variable is set."""
        with pytest.raises(ValueError, match="COINJAR_"):
            CoinjarConfig.from_env()

    def test_from_file(self, tmp_path: Path) -> None:
        """Should read config.json from the XDG config dir."""
        config_dir = tmp_path / "coinjar"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(
            json.dumps({"ledger_path": "books/main.coin", "amount_column": 60})
        )

        config = CoinjarConfig.load()

        assert config.ledger_path == Path("books/main.coin")
        assert config.amount_column == 60
        assert not config.strict_currencies

    def test_missing_file(self, tmp_path: Path) -> None:
        """Should raise FileNotFoundError for a missing file."""
        with pytest.raises(FileNotFoundError):
            CoinjarConfig.from_file(tmp_path / "nope.json")

    def test_env_takes_precedence(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should prefer the environment over the file."""
        config_dir = tmp_path / "coinjar"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(json.dumps({"history_limit": 7}))
        monkeypatch.setenv("COINJAR_HISTORY_LIMIT", "3")

        assert CoinjarConfig.load().history_limit == 3
