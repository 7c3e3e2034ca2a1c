"""Global pytest fixtures for fluentkit."""

from __future__ import annotations

from pathlib import Path

import pytest

from fluentkit.config import DNS_LIFETIME_ENV_VAR, LOCALE_ENV_VAR, TMPDIR_ENV_VAR
from fluentkit.locales import LocaleCache


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test without fluentkit environment overrides."""
    for name in (LOCALE_ENV_VAR, TMPDIR_ENV_VAR, DNS_LIFETIME_ENV_VAR):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def locale_cache() -> LocaleCache:
    """A fresh, empty locale cache."""
    return LocaleCache()


@pytest.fixture
def barcode_tmpdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point FLUENTKIT_TMPDIR at a per-test directory."""
    target = tmp_path / "barcodes"
    target.mkdir()
    monkeypatch.setenv(TMPDIR_ENV_VAR, str(target))
    return target
