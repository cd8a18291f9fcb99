"""Configuration bundle and its on-disk / environment sources.

Non-secret settings live in ``~/.config/whstats/config.json``. Secrets (the
Redmine API key and the MSSQL password) are kept in the OS keyring by
``login_helper`` and never written to the file. Any value can be overridden
through the environment or a ``.env`` file.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "whstats"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_REDMINE_URL = "https://redmine.wirth-horn.de"
DEFAULT_MSSQL_SERVER = "10.10.10.15"
DEFAULT_MSSQL_DATABASE = "wh_timelogger"

SECRET_FIELDS = ("redmine_api_key", "mssql_password")

FIELD_LABELS = {
    "redmine_url": "Redmine URL",
    "redmine_api_key": "Redmine API Key",
    "mssql_server": "MSSQL Server",
    "mssql_database": "MSSQL Database",
    "mssql_user": "MSSQL User",
    "mssql_password": "MSSQL Password",
    "user_id": "User ID",
}

LEGACY_KEYS = {
    "redmineUrl": "redmine_url",
    "redmineApiKey": "redmine_api_key",
    "mssqlServer": "mssql_server",
    "mssqlDatabase": "mssql_database",
    "mssqlUser": "mssql_user",
    "mssqlPassword": "mssql_password",
    "slackUserId": "user_id",
}

ENV_VARS = {
    "redmine_url": ("REDMINE_URL",),
    "redmine_api_key": ("REDMINE_API_KEY",),
    "mssql_server": ("MSSQL_SERVER",),
    "mssql_database": ("MSSQL_DATABASE",),
    "mssql_user": ("MSSQL_USER",),
    "mssql_password": ("MSSQL_PASSWORD",),
    "user_id": ("WHSTATS_USER_ID", "SLACK_USER_ID"),
}


@dataclass(frozen=True)
class Config:
    redmine_url: str = ""
    redmine_api_key: str = ""
    mssql_server: str = ""
    mssql_database: str = ""
    mssql_user: str = ""
    mssql_password: str = ""
    user_id: str = ""

    def missing_fields(self) -> list[str]:
        return [FIELD_LABELS[f.name] for f in fields(self) if not getattr(self, f.name)]

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def public_dict(self) -> dict:
        data = asdict(self)
        for name in SECRET_FIELDS:
            data.pop(name)
        return data

    def masked_api_key(self) -> str:
        if not self.redmine_api_key:
            return "<not set>"
        return f"{self.redmine_api_key[:8]}..."


def normalize_url(url: str) -> str:
    return url.strip().rstrip("/")


def get_config_path() -> Path:
    return CONFIG_FILE


def config_exists(path: Path | None = None) -> bool:
    return (path or CONFIG_FILE).exists()


def load_stored_config(path: Path | None = None) -> Config | None:
    """Read the config file. Returns None when it is missing or unreadable.

    Files written by whstats 0.x use camelCase keys and carry the secrets
    inline; those are mapped over until the next ``whstats --setup``.
    """
    path = path or CONFIG_FILE
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level is not an object", path)
        return None

    known = {f.name for f in fields(Config)}
    values = {k: str(v) for k, v in data.items() if k in known and k not in SECRET_FIELDS}
    legacy = {LEGACY_KEYS[k]: str(v) for k, v in data.items() if k in LEGACY_KEYS and v}
    if legacy:
        logger.warning("Config file %s uses the old camelCase format; run 'whstats --setup' to migrate it", path)
        for name, value in legacy.items():
            values.setdefault(name, value)
    if "redmine_url" in values:
        values["redmine_url"] = normalize_url(values["redmine_url"])
    return Config(**values)


def save_config(config: Config, path: Path | None = None) -> Path:
    path = path or CONFIG_FILE
    path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    path.write_text(json.dumps(config.public_dict(), indent=2), encoding="utf-8")
    os.chmod(path, 0o600)
    logger.debug("Config written to %s", path)
    return path


def delete_config(path: Path | None = None) -> bool:
    path = path or CONFIG_FILE
    if path.exists():
        path.unlink()
        return True
    return False


def apply_env_overrides(config: Config, environ=None) -> Config:
    """Return ``config`` with every value set in the environment (or ``.env``) taking precedence."""
    if environ is None:
        load_dotenv()
        environ = os.environ
    overrides = {}
    for name, env_names in ENV_VARS.items():
        for env_name in env_names:
            value = environ.get(env_name)
            if value:
                overrides[name] = value
                break
    if "redmine_url" in overrides:
        overrides["redmine_url"] = normalize_url(overrides["redmine_url"])
    return replace(config, **overrides)
