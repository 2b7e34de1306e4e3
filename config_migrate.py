# File: config_migrate.py
"""
config_migrate.py

On startup, loads config.json and brings it up to the current schema:
- If config.json is missing, writes a default template and exits.
- Renames legacy keys (api_url -> base_url, token_file -> token_path).
- Adds any missing keys with their defaults and writes the file back.
- Rejects values the log viewer cannot work with (ConfigError).
"""
import json
import sys
from pathlib import Path

from credentials import DEFAULT_TOKEN_PATH
from errors import ConfigError

DEFAULTS = {
    'base_url': 'http://localhost:3000',
    'token_path': DEFAULT_TOKEN_PATH,
    'buffer_capacity': 10000,
    'default_tail': '1000',
    'refresh_interval_seconds': 1.0,
    'request_timeout_seconds': 10,
    'reload_delay_seconds': 5,
    'screen_lines': 40,
}

LEGACY_KEYS = {
    'api_url': 'base_url',
    'token_file': 'token_path',
}


def validate_config(cfg):
    cap = cfg['buffer_capacity']
    if not isinstance(cap, int) or isinstance(cap, bool) or cap < 1:
        raise ConfigError(f"'buffer_capacity' must be a positive integer, got {cap!r}")
    tail = str(cfg['default_tail'])
    if tail != 'all' and not tail.isdigit():
        raise ConfigError(f"'default_tail' must be 'all' or a number, got {cfg['default_tail']!r}")
    for key in ('refresh_interval_seconds', 'request_timeout_seconds', 'reload_delay_seconds'):
        if not isinstance(cfg[key], (int, float)) or cfg[key] < 0:
            raise ConfigError(f"'{key}' must be a non-negative number, got {cfg[key]!r}")
    if not str(cfg['base_url']).startswith(('http://', 'https://')):
        raise ConfigError(f"'base_url' must be an http(s) URL, got {cfg['base_url']!r}")
    return cfg


def migrate_config(path='config.json'):
    p = Path(path)
    # If no config exists, create a default template and exit
    if not p.exists():
        p.write_text(json.dumps(DEFAULTS, indent=2) + '\n')
        print(f"Created default config at '{path}'. Please edit and re-run.")
        sys.exit(0)

    try:
        raw = json.loads(p.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"'{path}' is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must hold a JSON object")

    updated = False
    for old, new in LEGACY_KEYS.items():
        if old in raw:
            value = raw.pop(old)
            raw.setdefault(new, value)
            updated = True
    for key, value in DEFAULTS.items():
        if key not in raw:
            raw[key] = value
            updated = True
    if updated:
        p.write_text(json.dumps(raw, indent=2) + '\n')
        print(f"Updated config '{path}' with missing keys. Please review.")
    return validate_config(raw)


if __name__ == '__main__':
    migrate_config()
