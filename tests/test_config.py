from __future__ import annotations

import pytest

from sales_sync.errors import InvalidArgument
from sales_sync.utils import config as config_mod


@pytest.fixture(autouse=True)
def _clear_cache():
    config_mod.load_config.cache_clear()
    yield
    config_mod.load_config.cache_clear()


def _write(tmp_path, text):
    path = tmp_path / "sales_sync.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_env_expansion_and_roster(tmp_path, monkeypatch):
    monkeypatch.setenv("SPREADSHEET_ID", "abc123")
    monkeypatch.delenv("GOOGLE_SERVICE_ACCOUNT", raising=False)
    path = _write(
        tmp_path,
        """
sheets:
  spreadsheet_id: ${SPREADSHEET_ID}
  credentials_json: ${GOOGLE_SERVICE_ACCOUNT}
  clear_rows: 500
stores:
  - name: North Edsa
  - name: Rockwell
    tab: Rockwell Daily
formatting:
  banding: true
""",
    )
    cfg = config_mod.load_config(path)
    assert cfg.sheets.spreadsheet_id == "abc123"
    assert cfg.sheets.credentials_json == ""
    assert cfg.sheets.clear_rows == 500
    assert cfg.sheets.clear_cols == 26
    assert cfg.sheets.retry_attempts == 1
    assert cfg.formatting.banding is True
    assert cfg.formatting.header_bg_rgb == (0.2, 0.4, 0.6)
    assert cfg.store_tab("north edsa") == "North Edsa"
    assert cfg.store_tab("Rockwell") == "Rockwell Daily"
    assert cfg.store_tab("Unknown") is None
    assert config_mod.require_spreadsheet_id(cfg.sheets) == "abc123"


def test_missing_spreadsheet_id(tmp_path, monkeypatch):
    monkeypatch.delenv("SPREADSHEET_ID", raising=False)
    cfg = config_mod.load_config(_write(tmp_path, "sheets:\n  spreadsheet_id: ${SPREADSHEET_ID}\n"))
    with pytest.raises(InvalidArgument):
        config_mod.require_spreadsheet_id(cfg.sheets)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        config_mod.load_config(tmp_path / "nope.yaml")


def test_get_env_stripped(monkeypatch):
    monkeypatch.setenv("SALES_SYNC_TEST_VALUE", '  "quoted"  ')
    assert config_mod.get_env_stripped("SALES_SYNC_TEST_VALUE") == "quoted"
    assert config_mod.get_env_stripped("SALES_SYNC_UNSET_VALUE", "dflt") == "dflt"
