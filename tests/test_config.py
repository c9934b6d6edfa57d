import json

import pytest

from utils.config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv('HOST', raising=False)
    monkeypatch.delenv('PORT', raising=False)


def write_config(tmp_path, data):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps(data), encoding='utf-8')
    return str(path)


def test_defaults_when_file_missing(tmp_path):
    config = Config(str(tmp_path / 'missing.json'))

    assert config.host == '0.0.0.0'
    assert config.port == 37813
    assert config.client_expiry == 5
    assert config.max_alarms == 4
    assert config.send_timeout == 2.0


def test_values_from_file(tmp_path):
    config = Config(write_config(tmp_path, {
        'host': '127.0.0.1',
        'port': 9000,
        'clientExpiry': 10,
        'maxAlarms': 8,
        'sendTimeout': 0.5,
    }))

    assert config.host == '127.0.0.1'
    assert config.port == 9000
    assert config.client_expiry == 10
    assert config.max_alarms == 8
    assert config.send_timeout == 0.5


def test_invalid_values_fall_back_to_defaults(tmp_path):
    config = Config(write_config(tmp_path, {
        'port': 'eighty',
        'clientExpiry': -1,
        'maxAlarms': 2.5,
        'sendTimeout': True,
    }))

    assert config.port == 37813
    assert config.client_expiry == 5
    assert config.max_alarms == 4
    assert config.send_timeout == 2.0


def test_malformed_file_uses_defaults(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text('{not json', encoding='utf-8')

    config = Config(str(path))

    assert config.port == 37813


def test_environment_overrides_file(tmp_path, monkeypatch):
    monkeypatch.setenv('HOST', '10.0.0.1')
    monkeypatch.setenv('PORT', '4000')

    config = Config(write_config(tmp_path, {'host': '127.0.0.1', 'port': 9000}))

    assert config.host == '10.0.0.1'
    assert config.port == 4000


def test_invalid_port_environment_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv('PORT', 'abc')

    config = Config(write_config(tmp_path, {'port': 9000}))

    assert config.port == 9000
