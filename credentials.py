# File: credentials.py
"""
credentials.py

Reads and stores the agent bearer token in a client-local token file.
Sessions never read this themselves; the caller loads the token and passes it in.
"""
import os
from pathlib import Path

DEFAULT_TOKEN_PATH = '~/.config/opswatch/auth_token'


def read_token(path=DEFAULT_TOKEN_PATH):
    """Return the stored token, or None if there is none."""
    p = Path(path).expanduser()
    if not p.exists():
        return None
    token = p.read_text(encoding='utf-8').strip()
    return token or None


def save_token(token, path=DEFAULT_TOKEN_PATH):
    token = token.strip()
    if not token:
        raise ValueError("token is empty")
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(token + '\n', encoding='utf-8')
    os.chmod(p, 0o600)
    return p
