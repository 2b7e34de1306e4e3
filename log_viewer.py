# File: log_viewer.py
"""
log_viewer.py

Provides LogViewer, the model behind one log view (a container's logs, or the
agent's deployment log). It owns the LineBuffer and the single active
StreamSession for its target and keeps them consistent:
- start()/restart()/set_query() cancel the running session, clear the buffer
  by advancing its epoch, and launch a fresh session in `connecting`
- filter, quick filters, pause and export only change what is shown
- when a session reaches `complete`, on_reload fires once after reload_delay
  seconds, unless close() comes first
Observers register `on_change`; it fires on every buffer mutation and on
state changes of the current session.
"""
import logging
import threading

from line_buffer import DEFAULT_CAPACITY, LineBuffer
from log_feed import SessionState, StreamSession
from log_query import export_logs, filter_lines, toggle_filter
from stream_target import StreamQuery, query_from_preset

logger = logging.getLogger(__name__)

RELOAD_DELAY_SECONDS = 5.0


class LogViewer:
    def __init__(self, transport, target, token, query=None, capacity=DEFAULT_CAPACITY,
                 on_change=None, on_reload=None, reload_delay=RELOAD_DELAY_SECONDS,
                 launcher=None, timer_factory=threading.Timer):
        self.transport = transport
        self.target = target
        self._token = token
        if query is None and target.supports_query:
            query = StreamQuery.tail()
        self.query = query
        self.buffer = LineBuffer(capacity)
        self.search = ""
        self.paused = False
        self.session = None
        self.reload_delay = reload_delay
        self._on_change = on_change
        self._on_reload = on_reload
        self._launch = launcher or (lambda session: session.start())
        self._timer_factory = timer_factory
        self._reload_timer = None
        self._closed = False
        self._lock = threading.RLock()
        if on_change is not None:
            self.buffer.subscribe(on_change)

    @property
    def status(self) -> str:
        session = self.session
        return session.state if session is not None else SessionState.CONNECTING

    # --- session lifecycle ---

    def start(self, preamble=()):
        """
        Start following the target. `preamble` lines are placed at the top of
        the fresh buffer before the stream delivers anything.
        """
        return self._restart(preamble)

    def restart(self):
        return self._restart()

    def set_query(self, query: StreamQuery):
        if not self.target.supports_query:
            raise ValueError(f"{self.target.short_id} does not take a time range")
        self.query = query
        logger.info("[%s] time range changed to %s", self.target.short_id, query.to_params())
        return self._restart()

    def select_preset(self, name, now=None):
        return self.set_query(query_from_preset(name, now))

    def _restart(self, preamble=()):
        with self._lock:
            if self._closed:
                raise RuntimeError("viewer is closed")
            if self.session is not None:
                self.session.cancel()
            self._cancel_reload()
            epoch = self.buffer.advance_epoch()
            for line in preamble:
                self.buffer.append_if_current(epoch, line)
            session = StreamSession(
                self.transport, self.target, self.buffer, epoch, self._token,
                query=self.query, on_state=self._session_state,
            )
            self.session = session
        self._launch(session)
        return session

    def close(self):
        """Tear the view down: abort the stream and drop any pending reload."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._cancel_reload()
            if self.session is not None:
                self.session.cancel()
        if self._on_change is not None:
            self.buffer.unsubscribe(self._on_change)

    def _session_state(self, session, state):
        if session is not self.session:
            return
        if state == SessionState.COMPLETE:
            self._schedule_reload()
        if self._on_change is not None:
            self._on_change()

    def _schedule_reload(self):
        if self._on_reload is None:
            return
        with self._lock:
            if self._closed:
                return
            self._cancel_reload()
            timer = self._timer_factory(self.reload_delay, self._fire_reload)
            timer.daemon = True
            self._reload_timer = timer
        timer.start()

    def _fire_reload(self):
        with self._lock:
            if self._closed:
                return
            self._reload_timer = None
        logger.info("[%s] running post-completion reload", self.target.short_id)
        self._on_reload()

    def _cancel_reload(self):
        # caller holds self._lock
        if self._reload_timer is not None:
            self._reload_timer.cancel()
            self._reload_timer = None

    # --- view ---

    def clear(self):
        self.buffer.clear()

    def set_filter(self, term):
        self.search = term or ""
        if self._on_change is not None:
            self._on_change()

    def toggle_quick_filter(self, tag):
        self.set_filter(toggle_filter(self.search, tag))
        return self.search

    def toggle_pause(self):
        # presentation only; the stream keeps filling the buffer
        self.paused = not self.paused
        return self.paused

    def visible_lines(self):
        return filter_lines(self.buffer.snapshot(), self.search)

    def match_count(self):
        return len(self.visible_lines())

    def export(self, out_dir='.', selection_text=None, now=None):
        return export_logs(self.visible_lines(), self.target.short_id, out_dir,
                           selection_text=selection_text, now=now)
