from __future__ import annotations

from pathlib import Path

import pytest

from longbox.config import (
    DEFAULT_CANDIDATE_CONFIDENCE,
    InvalidConfigurationError,
    get_database_config,
    get_resolution_config,
    get_storage_config,
    optional_env_var,
)


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  ")

    assert optional_env_var("EXAMPLE_VAR") is None


def test_resolution_config_defaults() -> None:
    config = get_resolution_config()

    assert config.default_confidence == DEFAULT_CANDIDATE_CONFIDENCE
    assert config.policy_name == "default"


def test_resolution_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LONGBOX_DEFAULT_CONFIDENCE", "0.65")
    monkeypatch.setenv("LONGBOX_POLICY_NAME", "curator")

    config = get_resolution_config()

    assert config.default_confidence == 0.65
    assert config.policy_name == "curator"


@pytest.mark.parametrize("raw", ["high", "1.5", "-0.1"])
def test_resolution_config_rejects_bad_confidence(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("LONGBOX_DEFAULT_CONFIDENCE", raw)

    with pytest.raises(InvalidConfigurationError, match="LONGBOX_DEFAULT_CONFIDENCE"):
        get_resolution_config()


def test_storage_config_uses_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LONGBOX_DATA_DIR", str(tmp_path))

    storage = get_storage_config()

    assert storage.database_path() == tmp_path.resolve() / "longbox.db"
    assert storage.database_uri().startswith("sqlite+pysqlite:///")


def test_database_config_prefers_explicit_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"


def test_database_config_falls_back_to_storage(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("LONGBOX_DATA_DIR", str(tmp_path))

    assert get_database_config().uri.endswith("longbox.db")
