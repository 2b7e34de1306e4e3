"""Tests for stream_target: queries, presets and the two log sources."""

import pytest

from stream_target import (
    UPDATE_COMPLETE_SENTINEL,
    StreamQuery,
    container_logs,
    deployment_logs,
    query_from_preset,
)


def test_tail_and_since_params():
    assert StreamQuery.tail(100).to_params() == {'tail': '100'}
    assert StreamQuery.tail("all").to_params() == {'tail': 'all'}
    assert StreamQuery.since(1700000000).to_params() == {'since': '1700000000'}


@pytest.mark.parametrize("kwargs", [
    {'mode': 'tail', 'count': 'lots'},
    {'mode': 'since'},
    {'mode': 'follow'},
])
def test_invalid_queries(kwargs):
    with pytest.raises(ValueError):
        StreamQuery(**kwargs)


def test_last_minutes():
    assert StreamQuery.last_minutes(60, now=10_000.7) == StreamQuery.since(10_000 - 3600)


@pytest.mark.parametrize("name, params", [
    ("last_100", {'tail': '100'}),
    ("last_1000", {'tail': '1000'}),
    ("all", {'tail': 'all'}),
    ("last_15m", {'since': str(100_000 - 15 * 60)}),
    ("last_1h", {'since': str(100_000 - 3600)}),
    ("last_24h", {'since': str(100_000 - 86400)}),
])
def test_presets(name, params):
    assert query_from_preset(name, now=100_000).to_params() == params


def test_unknown_preset():
    with pytest.raises(ValueError):
        query_from_preset("last_week")


def test_container_target():
    target = container_logs("0123456789abcdef")
    assert target.path == "/api/docker/containers/0123456789abcdef/logs"
    assert target.short_id == "0123456789ab"
    assert target.params_for(StreamQuery.tail(5)) == {'tail': '5'}
    assert not target.is_complete(UPDATE_COMPLETE_SENTINEL)


def test_deployment_target():
    target = deployment_logs()
    assert target.path == "/api/deploy/logs"
    assert target.short_id == "deploy"
    assert target.params_for(StreamQuery.tail(5)) == {}
    assert target.is_complete("✅ Update complete! Service restarting...")
    assert not target.is_complete("update complete")
