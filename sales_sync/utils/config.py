"""
Configuration loader for the sales_sync package.

Reads `config/sales_sync.yaml`, loads `.env`/`.env.local`, expands environment
variables, and exposes typed settings for the spreadsheet client, the
formatting pass, the store roster and logging.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import yaml
from dotenv import load_dotenv

from sales_sync.errors import InvalidArgument

ROOT_DIR = Path(os.getenv("SALES_SYNC_ROOT", Path(__file__).resolve().parents[2]))
DEFAULT_CONFIG_PATH = ROOT_DIR / "config" / "sales_sync.yaml"

RGB = Tuple[float, float, float]


def get_env_stripped(name: str, default: str = "") -> str:
    val = os.getenv(name)
    if val is None:
        return default
    s = val.strip()
    if (s.startswith("'") and s.endswith("'")) or (s.startswith('"') and s.endswith('"')):
        s = s[1:-1]
    return s


def load_env() -> None:
    # .env.local overrides .env
    load_dotenv(ROOT_DIR / ".env")
    load_dotenv(ROOT_DIR / ".env.local", override=True)


def _expand_env(value: Any) -> Any:
    """Recursively expand environment variables inside CONFIG values."""
    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        # unset variables are left verbatim by expandvars
        if expanded.startswith("${") and expanded.endswith("}"):
            return ""
        return expanded
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_env(val) for key, val in value.items()}
    return value


def _rgb(value: Any, default: RGB) -> RGB:
    if not value:
        return default
    red, green, blue = (float(part) for part in value)
    return (red, green, blue)


@dataclass(frozen=True)
class SheetsSettings:
    spreadsheet_id: str
    credentials_json: str = ""
    credentials_file: str = ""
    clear_rows: int = 2000
    clear_cols: int = 26
    request_timeout_s: float = 60.0
    retry_attempts: int = 1


@dataclass(frozen=True)
class FormattingSettings:
    banding: bool = False
    border_rgb: RGB = (0.85, 0.85, 0.85)
    header_bg_rgb: RGB = (0.2, 0.4, 0.6)
    header_text_rgb: RGB = (1.0, 1.0, 1.0)
    band_rgb: RGB = (0.95, 0.95, 0.95)


@dataclass(frozen=True)
class StoreConfig:
    name: str
    tab: str


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(message)s"


@dataclass(frozen=True)
class AppConfig:
    sheets: SheetsSettings
    formatting: FormattingSettings
    stores: Sequence[StoreConfig]
    logging: LoggingSettings

    def store_tab(self, store_name: str) -> Optional[str]:
        key = store_name.strip().lower()
        for store in self.stores:
            if store.name.strip().lower() == key:
                return store.tab
        return None


def _build_config(raw: Dict[str, Any]) -> AppConfig:
    sheets_raw = dict(raw.get("sheets") or {})
    sheets_cfg = SheetsSettings(
        spreadsheet_id=str(sheets_raw.get("spreadsheet_id") or "").strip(),
        credentials_json=str(sheets_raw.get("credentials_json") or ""),
        credentials_file=str(sheets_raw.get("credentials_file") or ""),
        clear_rows=int(sheets_raw.get("clear_rows", 2000)),
        clear_cols=int(sheets_raw.get("clear_cols", 26)),
        request_timeout_s=float(sheets_raw.get("request_timeout_s", 60)),
        retry_attempts=max(1, int(sheets_raw.get("retry_attempts", 1))),
    )

    fmt_raw = dict(raw.get("formatting") or {})
    defaults = FormattingSettings()
    formatting_cfg = FormattingSettings(
        banding=bool(fmt_raw.get("banding", False)),
        border_rgb=_rgb(fmt_raw.get("border_rgb"), defaults.border_rgb),
        header_bg_rgb=_rgb(fmt_raw.get("header_bg_rgb"), defaults.header_bg_rgb),
        header_text_rgb=_rgb(fmt_raw.get("header_text_rgb"), defaults.header_text_rgb),
        band_rgb=_rgb(fmt_raw.get("band_rgb"), defaults.band_rgb),
    )

    stores = []
    for entry in raw.get("stores") or []:
        name = str(entry.get("name") or "").strip()
        if not name:
            continue
        tab = str(entry.get("tab") or name).strip()
        stores.append(StoreConfig(name=name, tab=tab))

    log_raw = dict(raw.get("logging") or {})
    logging_cfg = LoggingSettings(
        level=str(log_raw.get("level") or "INFO"),
        format=str(log_raw.get("format") or LoggingSettings.format),
    )

    return AppConfig(
        sheets=sheets_cfg,
        formatting=formatting_cfg,
        stores=tuple(stores),
        logging=logging_cfg,
    )


@lru_cache(maxsize=1)
def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load the configuration file and convert it into typed objects.

    Parameters
    ----------
    path: Optional path override; defaults to config/sales_sync.yaml.
    """
    load_env()
    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {cfg_path}")

    with cfg_path.open("r", encoding="utf-8") as fh:
        raw_data: Dict[str, Any] = yaml.safe_load(fh) or {}

    return _build_config(_expand_env(raw_data))


def require_spreadsheet_id(settings: SheetsSettings) -> str:
    spreadsheet_id = settings.spreadsheet_id
    if not spreadsheet_id:
        raise InvalidArgument(
            "Server configuration error: sheets.spreadsheet_id (SPREADSHEET_ID) not set."
        )
    return spreadsheet_id


def configure_logging(config: Optional[AppConfig] = None) -> None:
    """Configure root logging for entry points; libraries never call this."""
    settings = config.logging if config else LoggingSettings()
    level = get_env_stripped("SALES_SYNC_LOG_LEVEL") or settings.level
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=settings.format)


__all__ = [
    "AppConfig",
    "FormattingSettings",
    "LoggingSettings",
    "SheetsSettings",
    "StoreConfig",
    "configure_logging",
    "get_env_stripped",
    "load_config",
    "require_spreadsheet_id",
]
