"""Settings loaded from a JSON settings file, .env and the environment."""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from . import DEFAULT_BASE_LANGUAGE

log = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "localizer.json"

# Environment variable -> Settings attribute
ENV_VARS = {
    "TRANSLATIONS_DIR": "translations_dir",
    "BASE_LANGUAGE": "base_language",
    "TRANSLATIONS_BACKUP_DIR": "backup_dir",
    "GOOGLE_TRANSLATE_API_KEY": "gcp_api_key",
    "LIBRETRANSLATE_URL": "libre_url",
    "LIBRETRANSLATE_API_KEY": "libre_api_key",
    "TRANSLATE_BATCH_SIZE": "batch_size",
    "TRANSLATE_MAX_CONCURRENT": "max_concurrent",
    "TRANSLATE_DELAY_MS": "delay_ms",
}


@dataclass
class Settings:
    translations_dir: str = "./translations"
    base_language: str = DEFAULT_BASE_LANGUAGE
    backup_dir: str = ""           # empty = <translations_dir>/../translations_backups
    source_language: str = DEFAULT_BASE_LANGUAGE

    # Auto-translation batching
    batch_size: int = 25
    max_concurrent: int = 6
    delay_ms: int = 30
    success_threshold: float = 0.8
    timeout: int = 30

    # Providers
    gcp_api_key: str = ""
    gcp_endpoint: str = "https://translation.googleapis.com"
    mymemory_url: str = "https://api.mymemory.translated.net"
    libre_url: str = "https://libretranslate.com"
    libre_api_key: str = ""

    def update(self, values: dict):
        """Apply known keys from ``values``, coercing to the field's type."""
        types = {f.name: f.type for f in fields(self)}
        for key, raw in values.items():
            if key not in types or raw is None:
                continue
            try:
                setattr(self, key, _coerce(raw, types[key]))
            except (TypeError, ValueError):
                log.warning("Ignoring invalid value for %s: %r", key, raw)


def _coerce(raw, kind):
    if kind in (int, "int"):
        return int(raw)
    if kind in (float, "float"):
        return float(raw)
    return str(raw)


def load_settings(config_path: Optional[str] = None,
                  env_file: Optional[str] = None) -> Settings:
    """Build settings from defaults, the JSON settings file and the environment.

    Later sources win: defaults < settings file < environment (.env included).
    A missing or unreadable settings file is not an error.
    """
    settings = Settings()

    path = config_path or DEFAULT_SETTINGS_FILE
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except FileNotFoundError:
        cfg = {}
        if config_path:
            log.warning("Settings file not found: %s", config_path)
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Could not read settings file %s: %s", path, e)
        cfg = {}
    if isinstance(cfg, dict):
        settings.update(cfg)

    load_dotenv(env_file or find_dotenv(usecwd=True), override=False)
    settings.update({attr: os.environ[var] for var, attr in ENV_VARS.items()
                     if os.environ.get(var)})
    return settings


def save_settings(settings: Settings, path: str = DEFAULT_SETTINGS_FILE):
    """Persist settings to a JSON file (API keys included)."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(settings), f, ensure_ascii=False, indent=2)
