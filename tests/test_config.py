import json
import stat

import pytest

from whstats.config import Config, apply_env_overrides, delete_config, load_stored_config, save_config
from whstats.errors import ConfigError
from whstats.login_helper import (
    SERVICE,
    clear_stored_credentials,
    ensure_credentials,
    load_config,
    prompt_for_config,
)


def test_save_keeps_secrets_out_of_file(tmp_path, sample_config):
    path = tmp_path / "whstats" / "config.json"
    save_config(sample_config, path)

    data = json.loads(path.read_text())
    assert "redmine_api_key" not in data
    assert "mssql_password" not in data
    assert data["user_id"] == "42"
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_load_missing_or_broken_file(tmp_path):
    path = tmp_path / "config.json"
    assert load_stored_config(path) is None
    path.write_text("{not json")
    assert load_stored_config(path) is None


def test_delete_config(tmp_path, sample_config):
    path = tmp_path / "config.json"
    assert delete_config(path) is False
    save_config(sample_config, path)
    assert delete_config(path) is True
    assert not path.exists()


def test_missing_fields():
    config = Config(redmine_url="https://r.example.com", user_id="1")
    assert "Redmine API Key" in config.missing_fields()
    assert "User ID" not in config.missing_fields()
    assert not config.is_complete()


def test_env_overrides_win():
    config = Config(redmine_url="https://old.example.com", user_id="1")
    environ = {"REDMINE_URL": "https://new.example.com/", "SLACK_USER_ID": "77", "MSSQL_PASSWORD": "pw"}
    updated = apply_env_overrides(config, environ)
    assert updated.redmine_url == "https://new.example.com"
    assert updated.user_id == "77"
    assert updated.mssql_password == "pw"


def test_whstats_user_id_preferred_over_slack_alias():
    updated = apply_env_overrides(Config(), {"WHSTATS_USER_ID": "5", "SLACK_USER_ID": "6"})
    assert updated.user_id == "5"


def test_ensure_credentials_merges_file_and_keyring(tmp_path, sample_config, fake_keyring):
    path = tmp_path / "config.json"
    save_config(sample_config, path)
    fake_keyring.set_password(SERVICE, "redmine_api_key", sample_config.redmine_api_key)
    fake_keyring.set_password(SERVICE, "mssql_password", sample_config.mssql_password)

    assert ensure_credentials(path, environ={}) == sample_config


def test_ensure_credentials_without_anything(tmp_path, fake_keyring):
    with pytest.raises(ConfigError, match="No configuration found"):
        ensure_credentials(tmp_path / "config.json", environ={})


def test_ensure_credentials_reports_missing_secret(tmp_path, sample_config, fake_keyring):
    path = tmp_path / "config.json"
    save_config(sample_config, path)
    with pytest.raises(ConfigError, match="Redmine API Key"):
        ensure_credentials(path, environ={})


def test_prompt_for_config_saves_file_and_keyring(tmp_path, monkeypatch, fake_keyring):
    path = tmp_path / "config.json"
    answers = iter(["https://redmine.example.com/", "", "", "reader", "42"])
    secrets = iter(["api-key-123", "db-pass"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))
    monkeypatch.setattr("whstats.login_helper.getpass.getpass", lambda prompt: next(secrets))

    config = prompt_for_config(None, path=path)

    assert config.redmine_url == "https://redmine.example.com"
    assert config.mssql_database == "wh_timelogger"
    assert fake_keyring.get_password(SERVICE, "redmine_api_key") == "api-key-123"
    assert load_config(path) == config


def test_prompt_for_config_keeps_existing_values(tmp_path, monkeypatch, fake_keyring, sample_config):
    monkeypatch.setattr("builtins.input", lambda prompt: "")
    monkeypatch.setattr("whstats.login_helper.getpass.getpass", lambda prompt: "")
    config = prompt_for_config(sample_config, path=tmp_path / "config.json")
    assert config == sample_config


def test_prompt_for_config_rejects_missing(tmp_path, monkeypatch, fake_keyring):
    monkeypatch.setattr("builtins.input", lambda prompt: "")
    monkeypatch.setattr("whstats.login_helper.getpass.getpass", lambda prompt: "")
    with pytest.raises(ConfigError, match="Missing required fields"):
        prompt_for_config(None, path=tmp_path / "config.json")
    assert not (tmp_path / "config.json").exists()


def test_clear_stored_credentials(fake_keyring):
    assert clear_stored_credentials() is False
    fake_keyring.set_password(SERVICE, "mssql_password", "pw")
    assert clear_stored_credentials() is True
    assert fake_keyring.store == {}


def test_load_camelcase_config_file(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "redmineUrl": "https://redmine.example.com/",
        "redmineApiKey": "legacy-key",
        "mssqlServer": "10.0.0.5",
        "mssqlDatabase": "wh_timelogger",
        "mssqlUser": "reader",
        "mssqlPassword": "legacy-pw",
        "slackUserId": "42",
    }))

    config = load_stored_config(path)

    assert config.redmine_url == "https://redmine.example.com"
    assert config.redmine_api_key == "legacy-key"
    assert config.user_id == "42"
    assert config.is_complete()
    assert "whstats --setup" in caplog.text


def test_keyring_secret_wins_over_camelcase_file(tmp_path, fake_keyring):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"redmineUrl": "https://r.example.com", "redmineApiKey": "old"}))
    fake_keyring.set_password(SERVICE, "redmine_api_key", "new")
    assert load_config(path).redmine_api_key == "new"


@pytest.mark.parametrize("content", ["[1, 2, 3]", '"just a string"', "null"])
def test_non_object_config_file_is_ignored(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content)
    assert load_stored_config(path) is None
