import pytest

from cloudvars.config import CloudSettings, load_settings
from cloudvars.config.settings import DEFAULT_CLOUD_HOSTS
from cloudvars.errors import ConfigError


def test_defaults():
    settings = load_settings(project_id="abc")
    assert settings.cloud_hosts == list(DEFAULT_CLOUD_HOSTS)
    assert settings.platform == "native"
    assert settings.username is None
    assert settings.reconnect_base_delay_ms == 2000
    assert settings.reconnect_max_multiplier == 5


@pytest.mark.parametrize("raw, expected", [(123, "123"), (5.0, "5"), (1.5, "1.5"), ("mist/test", "mist/test")])
def test_project_id_is_normalised_to_string(raw, expected):
    assert load_settings(project_id=raw).project_id == expected


@pytest.mark.parametrize("raw", [True, None, [1], {"id": 1}, ""])
def test_invalid_project_id_is_a_config_error(raw):
    with pytest.raises(ConfigError):
        load_settings(project_id=raw)


def test_missing_project_id_is_a_config_error():
    with pytest.raises(ConfigError):
        load_settings()


def test_username_and_user_agent_must_be_strings():
    with pytest.raises(ConfigError):
        load_settings(project_id="1", username=1234)
    with pytest.raises(ConfigError):
        load_settings(project_id="1", user_agent=42)


def test_single_cloud_host_string_is_accepted():
    assert load_settings(project_id="1", cloud_hosts="wss://a").cloud_hosts == ["wss://a"]
    assert load_settings(project_id="1", cloud_hosts="wss://a, wss://b").cloud_hosts == ["wss://a", "wss://b"]


def test_empty_cloud_hosts_is_a_config_error():
    with pytest.raises(ConfigError):
        load_settings(project_id="1", cloud_hosts=[])


def test_settings_are_immutable():
    settings = load_settings(project_id="1")
    with pytest.raises(Exception):
        settings.project_id = "2"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CLOUDVARS_PROJECT_ID", "999")
    monkeypatch.setenv("CLOUDVARS_CLOUD_HOSTS", "wss://one,wss://two")
    monkeypatch.setenv("CLOUDVARS_PLATFORM", "browser")
    settings = CloudSettings()
    assert settings.project_id == "999"
    assert settings.cloud_hosts == ["wss://one", "wss://two"]
    assert settings.platform == "browser"


def test_yaml_config_file(monkeypatch, tmp_path):
    path = tmp_path / "cloudvars.yaml"
    path.write_text("project_id: 42\nuser_agent: tests@example.com\n", encoding="utf-8")
    monkeypatch.setenv("CLOUDVARS_CONFIG_FILE", str(path))
    settings = load_settings()
    assert settings.project_id == "42"
    assert settings.user_agent == "tests@example.com"
    assert settings.config_path == path


def test_yaml_config_file_must_be_a_mapping(monkeypatch, tmp_path):
    path = tmp_path / "cloudvars.yml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    monkeypatch.setenv("CLOUDVARS_CONFIG_FILE", str(path))
    with pytest.raises(ConfigError):
        load_settings()


def test_default_config_location_is_used_when_explicit_file_is_missing(monkeypatch, tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "cloudvars.yml").write_text("project_id: 7\nplatform: browser\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CLOUDVARS_CONFIG_FILE", str(tmp_path / "missing.yaml"))
    settings = load_settings()
    assert settings.project_id == "7"
    assert settings.platform == "browser"
    assert settings.config_path.name == "cloudvars.yml"


def test_unparseable_yaml_config_file_is_a_config_error(monkeypatch, tmp_path):
    path = tmp_path / "cloudvars.yaml"
    path.write_text("project_id: [unterminated\n", encoding="utf-8")
    monkeypatch.setenv("CLOUDVARS_CONFIG_FILE", str(path))
    with pytest.raises(ConfigError, match="Invalid cloudvars config file"):
        load_settings()
