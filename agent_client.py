# File: agent_client.py
"""
agent_client.py

HTTP access to the host agent's REST API using requests:
- open_stream(): issues a streaming GET for a log endpoint and hands back the
  live response; StreamSession reads and aborts it
- list_containers(), trigger_update(), get_version(): plain request/response calls
  used by the command line
All calls carry the bearer token passed in by the caller.
"""
import logging

import requests

logger = logging.getLogger(__name__)

STREAM_CHUNK_SIZE = None  # yield data as soon as it arrives


class AgentClient:
    def __init__(self, base_url, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.http = session or requests.Session()

    def _url(self, path):
        return f"{self.base_url}{path}"

    def _headers(self, token, extra=None):
        headers = {"Authorization": f"Bearer {token}"}
        if extra:
            headers.update(extra)
        return headers

    def open_stream(self, path, token, params=None):
        """
        Open a long-lived text/event-stream response. The caller owns the
        returned response and must close() it; closing aborts the transfer.
        """
        url = self._url(path)
        logger.info("Opening stream %s params=%s", url, params or {})
        # connect timeout only; the body is read for as long as the server keeps it open
        return self.http.get(
            url,
            params=params or None,
            headers=self._headers(token, {"Accept": "text/event-stream"}),
            stream=True,
            timeout=(self.timeout, None),
        )

    def list_containers(self, token):
        r = self.http.get(self._url("/api/docker/containers"), headers=self._headers(token), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def trigger_update(self, token):
        """Ask the agent to start its self-update; returns the server's message."""
        r = self.http.post(self._url("/api/deploy/webhook"), headers=self._headers(token), timeout=self.timeout)
        r.raise_for_status()
        return r.text

    def get_version(self, token):
        r = self.http.get(self._url("/api/version"), headers=self._headers(token), timeout=self.timeout)
        r.raise_for_status()
        # plain-text body, e.g. "0.4.2"
        return r.text.strip()
