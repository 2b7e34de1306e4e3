# File: log_feed.py
"""
log_feed.py

Provides StreamSession, which follows one log stream from the host agent
(container logs or deployment logs) and feeds its events into a LineBuffer.

State machine:
    connecting -> connected -> closed | error | complete
    connecting -> error
Cancelling is silent: the response is aborted and the session stops without a
state change or another buffer line. Every buffer write is gated on the epoch
the session was started with, so a session replaced by a restart can never
write into its successor's buffer.
"""
import logging
import threading

from agent_client import STREAM_CHUNK_SIZE
from errors import Cancellation, ConnectFailure, MissingCredential, StreamError, TransportFailure
from event_extract import iter_events
from frame_decoder import FrameDecoder

logger = logging.getLogger(__name__)

STREAM_STARTED = "--- Log Stream Started ---"
STREAM_CLOSED = "--- Stream Closed ---"


class SessionState:
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"
    ERROR = "error"
    COMPLETE = "complete"


class StreamSession:
    def __init__(self, transport, target, buffer, epoch, token, query=None, on_state=None):
        self.transport = transport
        self.target = target
        self.query = query
        self.buffer = buffer
        self.epoch = epoch
        self._token = token
        self._on_state = on_state
        self.state = SessionState.CONNECTING
        self._cancel_event = threading.Event()
        self._lock = threading.Lock()
        self._response = None
        self._thread = None

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def start(self):
        """Run the session on a background daemon thread."""
        self._thread = threading.Thread(
            target=self.run, name=f"log-feed-{self.target.short_id}", daemon=True
        )
        self._thread.start()

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)

    def cancel(self):
        """Abort the transport. Safe to call from any thread, any number of times."""
        if self._cancel_event.is_set():
            return
        self._cancel_event.set()
        logger.info("[%s] stream cancelled (epoch %d)", self.target.short_id, self.epoch)
        self._abort()

    def run(self):
        """Drive the session to a terminal state on the calling thread."""
        try:
            self._consume()
        except Cancellation:
            logger.debug("[%s] session stopped after cancel", self.target.short_id)
        except StreamError as e:
            self._fail(e)
        except Exception as e:
            # closing the response under a pending read surfaces here as an I/O error
            if self._is_live():
                self._fail(TransportFailure(e))
            else:
                logger.debug("[%s] read ended by abort: %r", self.target.short_id, e)
        finally:
            self._abort()

    def _consume(self):
        if not self._token:
            raise MissingCredential()
        self._check_live()
        response = self.transport.open_stream(
            self.target.path, self._token, self.target.params_for(self.query)
        )
        with self._lock:
            self._response = response
        # cancel() may have run while the request was in flight
        self._check_live()
        if not response.ok:
            raise ConnectFailure(response.status_code, response.reason)

        self._set_state(SessionState.CONNECTED)
        self._emit(STREAM_STARTED)

        decoder = FrameDecoder()
        for chunk in response.iter_content(chunk_size=STREAM_CHUNK_SIZE):
            self._check_live()
            for payload in iter_events(decoder.feed(chunk)):
                if self.target.is_complete(payload):
                    self._emit(payload)
                    self._set_state(SessionState.COMPLETE)
                    self._abort()
                    return
                self._emit(payload)

        decoder.close()
        self._check_live()
        self._emit(STREAM_CLOSED)
        self._set_state(SessionState.CLOSED)

    def _is_live(self) -> bool:
        return not self.cancelled and self.buffer.epoch == self.epoch

    def _check_live(self):
        if not self._is_live():
            raise Cancellation()

    def _emit(self, line):
        if self.cancelled or not self.buffer.append_if_current(self.epoch, line):
            raise Cancellation()

    def _set_state(self, state):
        with self._lock:
            if not self._is_live():
                raise Cancellation()
            self.state = state
        logger.info("[%s] %s", self.target.short_id, state)
        if self._on_state is not None:
            self._on_state(self, state)

    def _fail(self, error):
        if not self._is_live():
            return
        logger.warning("[%s] stream failed: %s", self.target.short_id, error)
        try:
            self._emit(error.diagnostic())
            self._set_state(SessionState.ERROR)
        except Cancellation:
            logger.debug("[%s] cancelled while reporting failure", self.target.short_id)

    def _abort(self):
        with self._lock:
            response, self._response = self._response, None
        if response is not None:
            response.close()
