import json

import pytest

from modrpc.config.loader import camel_to_snake, convert_keys, load_config
from modrpc.config.schema import ClientConfig, ServerConfig


def _write(tmp_path, data) -> str:
    path = tmp_path / "modrpc.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_defaults():
    config = ServerConfig()
    assert (config.port, config.api_dir_name, config.static_dir, config.cors) == (3000, "api", None, True)
    assert config.ssl.enabled is False
    assert config.production is False


def test_load_camel_case_file(tmp_path):
    path = _write(
        tmp_path,
        {"port": 8080, "apiDirName": "handlers", "staticDir": "public", "ssl": {"key": "k.pem", "cert": "c.pem"}},
    )
    config = load_config(path)
    assert config.port == 8080
    assert config.api_dir_name == "handlers"
    assert config.static_dir == "public"
    assert config.ssl.enabled is True


def test_overrides_win_and_none_is_ignored(tmp_path):
    path = _write(tmp_path, {"port": 8080, "ssl": {"key": "k.pem"}})
    config = load_config(path, port=9001, host=None, ssl={"cert": "c.pem"})
    assert config.port == 9001
    assert config.host == "0.0.0.0"
    assert (config.ssl.key, config.ssl.cert) == ("k.pem", "c.pem")


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("MODRPC_PORT", "9000")
    monkeypatch.setenv("MODRPC_ENV", "Production")
    monkeypatch.setenv("MODRPC_SSL__KEY", "env-key.pem")
    config = load_config()
    assert config.port == 9000
    assert config.production is True
    assert config.ssl.key == "env-key.pem"


@pytest.mark.parametrize("content", ["[1, 2]", "{broken", '{"port": "not-a-port"}'])
def test_bad_config_files_raise_value_error(tmp_path, content):
    path = tmp_path / "modrpc.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_missing_config_file(tmp_path):
    with pytest.raises(ValueError, match="Failed to load config"):
        load_config(tmp_path / "nope.json")


def test_key_conversion():
    assert camel_to_snake("apiDirName") == "api_dir_name"
    assert convert_keys({"sslConfig": [{"certFile": 1}]}) == {"ssl_config": [{"cert_file": 1}]}


def test_client_config_defaults():
    config = ClientConfig(url="http://localhost:3000")
    assert (config.headers, config.timeout, config.function_name) == ({}, 30.0, "")
