"""login_helper

Credential handling for whstats:
- `ensure_credentials()` builds the runtime `Config` from the config file, the OS
  keyring (`whstats` service) and environment overrides, and raises
  `ConfigError` when something is still missing.
- `prompt_for_config(existing)` walks the user through every field, reads
  secrets masked, saves plain settings to the config file and secrets to the
  keyring.
- `clear_stored_credentials()` removes the keyring entries again.
"""

from __future__ import annotations

import getpass
import logging
from dataclasses import replace

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .config import (
    DEFAULT_MSSQL_DATABASE,
    DEFAULT_MSSQL_SERVER,
    DEFAULT_REDMINE_URL,
    SECRET_FIELDS,
    Config,
    apply_env_overrides,
    load_stored_config,
    normalize_url,
    save_config,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)

SERVICE = "whstats"


def prompt_visible(prompt: str, default: str | None = None) -> str:
    question = f"{prompt} [{default}]: " if default else f"{prompt}: "
    answer = input(question).strip()
    return answer or default or ""


def prompt_secret(prompt: str, default: str | None = None) -> str:
    """Read a value without echo. An empty answer keeps ``default``.

    getpass puts the terminal back into its previous mode on every exit path,
    Ctrl+C included.
    """
    question = f"{prompt} [keep existing]: " if default else f"{prompt}: "
    answer = getpass.getpass(question).strip()
    return answer or default or ""


def load_secrets(config: Config) -> Config:
    secrets = {}
    for name in SECRET_FIELDS:
        try:
            value = keyring.get_password(SERVICE, name)
        except KeyringError as e:
            logger.warning("Could not read %s from keyring: %s", name, e)
            continue
        if value:
            secrets[name] = value
    return replace(config, **secrets)


def store_secrets(config: Config) -> None:
    for name in SECRET_FIELDS:
        value = getattr(config, name)
        if not value:
            continue
        try:
            keyring.set_password(SERVICE, name, value)
        except KeyringError as e:
            raise ConfigError(f"Could not save {name} to keyring: {e}") from e


def clear_stored_credentials() -> bool:
    """Remove secrets from the keyring. Returns True if anything was deleted."""
    removed = False
    for name in SECRET_FIELDS:
        try:
            keyring.delete_password(SERVICE, name)
            removed = True
        except PasswordDeleteError:
            continue
        except KeyringError as e:
            logger.warning("Could not delete %s from keyring: %s", name, e)
    return removed


def load_config(path=None) -> Config | None:
    """Stored settings plus keyring secrets, or None when nothing was set up."""
    stored = load_stored_config(path)
    if stored is None:
        return None
    return load_secrets(stored)


def ensure_credentials(path=None, environ=None) -> Config:
    """Return a complete runtime Config or raise ConfigError."""
    config = load_config(path) or Config()
    config = apply_env_overrides(config, environ)
    if not any(getattr(config, name) for name in ("redmine_url", "redmine_api_key", "mssql_server")):
        raise ConfigError("No configuration found. Run 'whstats --setup' to configure your credentials.")
    missing = config.missing_fields()
    if missing:
        raise ConfigError(
            f"Missing required fields: {', '.join(missing)}. "
            "Run 'whstats --setup' to configure your credentials."
        )
    return config


def prompt_for_config(existing: Config | None = None, path=None) -> Config:
    existing = existing or Config()
    print("\n  WH Stats Configuration\n")
    print("  Enter your credentials (press Enter to keep existing values)\n")

    config = Config(
        redmine_url=prompt_visible("  Redmine URL", existing.redmine_url or DEFAULT_REDMINE_URL),
        redmine_api_key=prompt_secret("  Redmine API Key", existing.redmine_api_key),
        mssql_server=prompt_visible("  MSSQL Server", existing.mssql_server or DEFAULT_MSSQL_SERVER),
        mssql_database=prompt_visible("  MSSQL Database", existing.mssql_database or DEFAULT_MSSQL_DATABASE),
        mssql_user=prompt_visible("  MSSQL User", existing.mssql_user),
        mssql_password=prompt_secret("  MSSQL Password", existing.mssql_password),
        user_id=prompt_visible(
            "  User ID (in timelogger). Use /wh debug in Slack to find it.", existing.user_id
        ),
    )

    missing = config.missing_fields()
    if missing:
        raise ConfigError(f"Missing required fields: {', '.join(missing)}")
    if not config.user_id.isdigit():
        raise ConfigError(f"User ID must be numeric, got {config.user_id!r}")

    config = replace(config, redmine_url=normalize_url(config.redmine_url))
    store_secrets(config)
    saved_to = save_config(config, path)
    print(f"\n  Config saved to {saved_to}\n")
    return config
