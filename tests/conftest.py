"""
Pytest fixtures and fakes for opswatch tests.

FakeResponse stands in for a streaming requests.Response. Its chunk list may
contain callables; they run between chunks, which lets a test act (cancel,
restart, clear) while a session is in the middle of reading.
"""

import pytest


class FakeResponse:
    def __init__(self, chunks=(), status_code=200, reason='OK', error=None):
        self.chunks = list(chunks)
        self.status_code = status_code
        self.reason = reason
        self.error = error
        self.closed = False
        self.delivered = 0

    @property
    def ok(self):
        return self.status_code < 400

    def iter_content(self, chunk_size=None):
        for chunk in self.chunks:
            if callable(chunk):
                chunk()
                continue
            self.delivered += 1
            yield chunk
        if self.error is not None:
            raise self.error

    def close(self):
        self.closed = True


class FakeTransport:
    """Hands out scripted responses and records every open_stream call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def open_stream(self, path, token, params=None):
        self.calls.append({'path': path, 'token': token, 'params': params})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeTimer:
    """threading.Timer replacement that only fires when told to."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function()


@pytest.fixture
def timers():
    created = []

    def factory(interval, function):
        timer = FakeTimer(interval, function)
        created.append(timer)
        return timer

    factory.created = created
    return factory
