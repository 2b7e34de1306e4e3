# File: stream_target.py
"""
stream_target.py

Describes what a StreamSession connects to:
- StreamQuery: the active time-range selector, either tail=<N|all> or since=<epoch seconds>
- StreamTarget: one log source on the agent (container logs or deployment logs),
  with its endpoint path, an optional completion sentinel and whether it accepts a query
- TIME_RANGE_PRESETS: the time ranges offered to the operator
"""
import time
from dataclasses import dataclass
from typing import Optional

UPDATE_COMPLETE_SENTINEL = "Update complete!"
DEFAULT_TAIL = "1000"


@dataclass(frozen=True)
class StreamQuery:
    mode: str = "tail"
    count: str = DEFAULT_TAIL
    epoch_seconds: Optional[int] = None

    def __post_init__(self):
        if self.mode == "tail":
            if self.count != "all" and not str(self.count).isdigit():
                raise ValueError(f"tail count must be a number or 'all', got {self.count!r}")
        elif self.mode == "since":
            if self.epoch_seconds is None:
                raise ValueError("since query needs epoch_seconds")
        else:
            raise ValueError(f"unknown query mode {self.mode!r}")

    @classmethod
    def tail(cls, count=DEFAULT_TAIL):
        return cls(mode="tail", count=str(count))

    @classmethod
    def since(cls, epoch_seconds: int):
        return cls(mode="since", count="", epoch_seconds=int(epoch_seconds))

    @classmethod
    def last_minutes(cls, minutes: int, now: Optional[float] = None):
        now = time.time() if now is None else now
        return cls.since(int(now) - minutes * 60)

    def to_params(self) -> dict:
        if self.mode == "tail":
            return {"tail": self.count}
        return {"since": str(self.epoch_seconds)}


# label -> (tail count, minutes back); exactly one of the two is set
TIME_RANGE_PRESETS = {
    "last_100": ("100", None),
    "last_1000": ("1000", None),
    "last_15m": (None, 15),
    "last_1h": (None, 60),
    "last_24h": (None, 1440),
    "all": ("all", None),
}


def query_from_preset(name: str, now: Optional[float] = None) -> StreamQuery:
    if name not in TIME_RANGE_PRESETS:
        raise ValueError(f"unknown time range {name!r}; choose from {', '.join(TIME_RANGE_PRESETS)}")
    tail, minutes = TIME_RANGE_PRESETS[name]
    if minutes is not None:
        return StreamQuery.last_minutes(minutes, now)
    return StreamQuery.tail(tail)


@dataclass(frozen=True)
class StreamTarget:
    target_id: str
    path: str
    sentinel: Optional[str] = None
    supports_query: bool = False

    @property
    def short_id(self) -> str:
        return self.target_id[:12]

    def is_complete(self, payload: str) -> bool:
        return self.sentinel is not None and self.sentinel in payload

    def params_for(self, query: Optional[StreamQuery]) -> dict:
        if not self.supports_query or query is None:
            return {}
        return query.to_params()


def container_logs(container_id: str) -> StreamTarget:
    return StreamTarget(
        target_id=container_id,
        path=f"/api/docker/containers/{container_id}/logs",
        supports_query=True,
    )


def deployment_logs() -> StreamTarget:
    return StreamTarget(
        target_id="deploy",
        path="/api/deploy/logs",
        sentinel=UPDATE_COMPLETE_SENTINEL,
    )
