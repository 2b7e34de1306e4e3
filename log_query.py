# File: log_query.py
"""
log_query.py

Derives what the operator sees from a buffer snapshot, and saves it:
- filter_lines: case-insensitive substring search, order preserved
- toggle_filter: quick-filter tags switch on, and off again on a second press
- export_logs: writes the current view (or a text selection) to
  logs-<shortId>-<selection|full>-<timestamp>.txt
None of these touch the buffer itself.
"""
import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

QUICK_FILTERS = ("ERROR", "WARN", "INFO")


def filter_lines(lines: list[str], term: str) -> list[str]:
    if not term:
        return list(lines)
    needle = term.lower()
    return [ln for ln in lines if needle in ln.lower()]


def toggle_filter(current: str, tag: str) -> str:
    return "" if current == tag else tag


def export_timestamp(now=None) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
    return stamp.replace(':', '-').replace('.', '-')


def export_filename(short_id: str, selection: bool, now=None) -> str:
    kind = 'selection' if selection else 'full'
    return f"logs-{short_id}-{kind}-{export_timestamp(now)}.txt"


def export_text(view: list[str], selection_text=None):
    """
    Returns (text, is_selection). A non-empty selection wins over the view.
    """
    if selection_text:
        return selection_text, True
    return '\n'.join(view), False


def export_logs(view: list[str], short_id: str, out_dir='.', selection_text=None, now=None):
    """
    Write the export artifact. Returns its path, or None when there is nothing to export.
    """
    text, is_selection = export_text(view, selection_text)
    if not text:
        return None
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / export_filename(short_id, is_selection, now)
    path.write_text(text, encoding='utf-8')
    logger.info("Exported %s to %s", 'selection' if is_selection else f"{len(view)} lines", path)
    return path
