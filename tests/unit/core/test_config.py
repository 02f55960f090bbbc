"""Unit tests for core config parsing."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from core.config import EtlConfig
from core.errors import EtlConfigError

_ENV_NAMES = (
    "ROOT_DIR",
    "INPUT_DIR",
    "OUTPUT_DIR",
    "SNAPSHOT_DIR",
    "DEFAULT_EXPORT_FORMAT",
    "OUTPUT_FILE_PREFIX",
    "USE_CATALOG_SCHEMA",
)


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_from_env_derives_directories_from_root(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Default directories should live under ROOT_DIR."""
    _clear_env(monkeypatch)
    monkeypatch.setenv("ROOT_DIR", str(tmp_path))

    config = EtlConfig.from_env()

    assert config.input_dir == tmp_path.resolve() / "sync-output"
    assert config.snapshot_dir == tmp_path.resolve() / "snapshots"
    assert config.default_export_format == "csv"


def test_from_env_honors_directory_overrides(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Explicit directory variables should replace the root defaults."""
    _clear_env(monkeypatch)
    monkeypatch.setenv("ROOT_DIR", str(tmp_path))
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "exports"))

    config = EtlConfig.from_env()

    assert config.output_dir == (tmp_path / "exports").resolve()


def test_from_env_raises_for_invalid_export_format(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for unsupported default export formats."""
    _clear_env(monkeypatch)
    monkeypatch.setenv("DEFAULT_EXPORT_FORMAT", "xlsx")

    with pytest.raises(EtlConfigError):
        EtlConfig.from_env()

    assert os.getenv("DEFAULT_EXPORT_FORMAT") == "xlsx"


def test_from_env_raises_for_invalid_catalog_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-boolean catalog schema flags."""
    _clear_env(monkeypatch)
    monkeypatch.setenv("USE_CATALOG_SCHEMA", "maybe")

    with pytest.raises(EtlConfigError):
        EtlConfig.from_env()

    assert os.getenv("USE_CATALOG_SCHEMA") == "maybe"


def test_from_env_parses_catalog_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    """Truthy catalog schema flags should enable catalog mode."""
    _clear_env(monkeypatch)
    monkeypatch.setenv("USE_CATALOG_SCHEMA", "True")

    config = EtlConfig.from_env()

    assert config.use_catalog_schema is True


def test_output_name_for_uses_unified_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unified output variables should rename streams case-insensitively."""
    _clear_env(monkeypatch)
    monkeypatch.setenv("HG_UNIFIED_OUTPUT_CUSTOMERS", "contacts")

    config = EtlConfig.from_env()

    assert config.output_name_for("customers") == "contacts"
    assert config.output_name_for("orders") == "orders"
