# tests/test_config.py

from creditvote_node import config


def test_defaults_without_file(tmp_path, monkeypatch):
    for name in ("CREDITVOTE_LOG_LEVEL", "CREDITVOTE_PERSIST", "CREDITVOTE_DATA_DIR", "CREDITVOTE_HOST", "CREDITVOTE_PORT"):
        monkeypatch.delenv(name, raising=False)
    cfg = config.load_config(str(tmp_path))
    assert cfg["logging"]["level"] == "INFO"
    assert config.persistence_enabled(cfg) is False
    assert config.get_bind_host(cfg) == "127.0.0.1"
    assert config.get_bind_port(cfg) == 8000


def test_yaml_overlays_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("CREDITVOTE_PORT", raising=False)
    monkeypatch.delenv("CREDITVOTE_PERSIST", raising=False)
    (tmp_path / config.CONFIG_FILENAME).write_text(
        "server:\n  port: 9100\npersistence:\n  enabled: true\ncors:\n  origins: https://vote.example\n"
    )
    cfg = config.load_config(str(tmp_path))
    assert config.get_bind_port(cfg) == 9100
    assert config.get_bind_host(cfg) == "127.0.0.1"  # untouched default
    assert config.persistence_enabled(cfg) is True
    assert config.get_persistence_settings(cfg)["filename"] == "creditvote_state.json"
    assert config.get_cors_origins(cfg) == ["https://vote.example"]


def test_broken_yaml_falls_back(tmp_path):
    (tmp_path / config.CONFIG_FILENAME).write_text("server: [unterminated\n")
    cfg = config.load_config(str(tmp_path))
    assert cfg["persistence"]["data_dir"]


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("CREDITVOTE_PORT", "8123")
    monkeypatch.setenv("CREDITVOTE_PERSIST", "yes")
    monkeypatch.setenv("CREDITVOTE_DATA_DIR", str(tmp_path / "state"))
    cfg = config.load_config(str(tmp_path))
    assert config.get_bind_port(cfg) == 8123
    assert config.persistence_enabled(cfg) is True
    assert config.get_persistence_settings(cfg)["data_dir"] == str(tmp_path / "state")


def test_bad_env_value_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("CREDITVOTE_PORT", "not-a-port")
    cfg = config.load_config(str(tmp_path))
    assert config.get_bind_port(cfg) == 8000


def test_overrides_do_not_leak_into_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("CREDITVOTE_HOST", "0.0.0.0")
    config.load_config(str(tmp_path))
    monkeypatch.delenv("CREDITVOTE_HOST")
    assert config.get_bind_host(config.load_config(str(tmp_path))) == "127.0.0.1"
