# File: event_extract.py
"""
event_extract.py

Filters decoded stream lines down to log events:
- a line is an event only if it starts with the "data:" marker
- the payload is the rest of the line with leading whitespace removed
- empty payloads and every other line shape (comments, keep-alives,
  event:/id:/retry: fields) are dropped
"""

DATA_MARKER = "data:"


def extract_event(line: str):
    """
    Returns the event payload for a line, or None if the line is not an event.
    """
    if not line.startswith(DATA_MARKER):
        return None
    payload = line[len(DATA_MARKER):].lstrip()
    return payload or None


def iter_events(lines):
    """Yield payloads for the event lines in `lines`, keeping their order."""
    for ln in lines:
        payload = extract_event(ln)
        if payload is not None:
            yield payload
