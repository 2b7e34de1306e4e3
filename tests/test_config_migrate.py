"""Tests for config_migrate: template creation, legacy keys and validation."""

import json

import pytest

from config_migrate import DEFAULTS, migrate_config
from errors import ConfigError


def write(path, data):
    path.write_text(json.dumps(data))


def test_missing_config_writes_template_and_exits(tmp_path):
    path = tmp_path / "config.json"
    with pytest.raises(SystemExit) as exc:
        migrate_config(path)
    assert exc.value.code == 0
    assert json.loads(path.read_text()) == DEFAULTS


def test_missing_keys_filled(tmp_path, capsys):
    path = tmp_path / "config.json"
    write(path, {'base_url': 'http://agent:3000'})
    cfg = migrate_config(path)
    assert cfg['base_url'] == 'http://agent:3000'
    assert cfg['buffer_capacity'] == 10000
    assert json.loads(path.read_text()) == cfg
    assert "Updated config" in capsys.readouterr().out


def test_complete_config_untouched(tmp_path, capsys):
    path = tmp_path / "config.json"
    write(path, DEFAULTS)
    before = path.read_text()
    assert migrate_config(path) == DEFAULTS
    assert path.read_text() == before
    assert capsys.readouterr().out == ""


def test_legacy_keys_renamed(tmp_path):
    path = tmp_path / "config.json"
    write(path, {'api_url': 'https://ops.example.net', 'token_file': '/tmp/tok'})
    cfg = migrate_config(path)
    assert cfg['base_url'] == 'https://ops.example.net'
    assert cfg['token_path'] == '/tmp/tok'
    assert 'api_url' not in cfg and 'token_file' not in cfg


@pytest.mark.parametrize("override", [
    {'buffer_capacity': 0},
    {'buffer_capacity': '100'},
    {'default_tail': 'lots'},
    {'reload_delay_seconds': -1},
    {'base_url': 'agent:3000'},
])
def test_invalid_values_rejected(tmp_path, override):
    path = tmp_path / "config.json"
    write(path, {**DEFAULTS, **override})
    with pytest.raises(ConfigError):
        migrate_config(path)


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        migrate_config(path)
