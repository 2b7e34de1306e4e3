# File: main.py
"""
main.py

Operator console for a single host agent:
  login TOKEN        store the agent's bearer token locally
  containers         list the host's containers
  logs CONTAINER     follow a container's logs with a time range and optional filter,
                     redrawing the screen every refresh interval; Ctrl+C pauses the
                     screen, a second Ctrl+C exits (and exports the current view
                     with --export-dir)
  update             trigger the agent self-update and follow its deployment log
                     until "Update complete!", then confirm the new version
"""
import argparse
import logging
import sys
import threading
from datetime import datetime, timezone

import requests

from agent_client import AgentClient
from config_migrate import migrate_config
from credentials import read_token, save_token
from errors import ConfigError
from log_feed import SessionState
from log_query import QUICK_FILTERS
from log_viewer import LogViewer
from stream_target import (
    TIME_RANGE_PRESETS,
    StreamQuery,
    container_logs,
    deployment_logs,
    query_from_preset,
)

CLEAR_SCREEN = '\u001b[H\u001b[2J'


def load_config(path='config.json'):
    return migrate_config(path)


def build_parser():
    parser = argparse.ArgumentParser(prog='opswatch', description="Follow container and deployment logs on a host agent.")
    parser.add_argument('--config', default='config.json', help="path to config.json")
    parser.add_argument('-v', '--verbose', action='store_true', help="debug logging to stderr")
    sub = parser.add_subparsers(dest='command', required=True)

    login = sub.add_parser('login', help="store the agent bearer token")
    login.add_argument('token')

    sub.add_parser('containers', help="list containers")

    logs = sub.add_parser('logs', help="follow a container's logs")
    logs.add_argument('container')
    rng = logs.add_mutually_exclusive_group()
    rng.add_argument('--tail', help="number of lines from the end, or 'all'")
    rng.add_argument('--since-minutes', type=int, help="start this many minutes back")
    rng.add_argument('--preset', choices=list(TIME_RANGE_PRESETS))
    flt = logs.add_mutually_exclusive_group()
    flt.add_argument('--filter', default='', help="case-insensitive substring")
    flt.add_argument('--quick', choices=QUICK_FILTERS, help="quick filter tag")
    logs.add_argument('--export-dir', help="export the visible lines here on exit")

    sub.add_parser('update', help="trigger an agent update and follow its log")
    return parser


def query_from_args(args, cfg, now=None):
    if args.tail:
        return StreamQuery.tail(args.tail)
    if args.since_minutes is not None:
        return StreamQuery.last_minutes(args.since_minutes, now)
    if args.preset:
        return query_from_preset(args.preset, now)
    return StreamQuery.tail(cfg['default_tail'])


def render(viewer, rows):
    now = datetime.now(timezone.utc)
    view = viewer.visible_lines()
    total = len(viewer.buffer)
    matches = f"  filter='{viewer.search}' matches={viewer.match_count()}" if viewer.search else ''
    paused = '  [paused]' if viewer.paused else ''
    print(CLEAR_SCREEN, end='')
    print(f"=== {now.isoformat(timespec='seconds')} UTC  target={viewer.target.short_id}  "
          f"status={viewer.status}  lines={total}/{viewer.buffer.capacity}{matches}{paused} ===")
    for ln in view[-rows:]:
        print(ln)
    if not view:
        print("No matches found." if total else "Waiting for logs...")
    print()
    print("Press Ctrl+C again to exit" if viewer.paused else "Press Ctrl+C to pause")


def follow(viewer, cfg, done):
    """
    Redraw until `done` is set or the session reaches a terminal state.
    The first Ctrl+C pauses redrawing while the stream keeps filling the
    buffer; a second one exits.
    """
    interval = float(cfg['refresh_interval_seconds'])
    rows = int(cfg['screen_lines'])
    while True:
        try:
            finished = done.is_set() or viewer.status in (SessionState.CLOSED, SessionState.ERROR)
            if finished or not viewer.paused:
                render(viewer, rows)
            if finished:
                return
            done.wait(interval)
        except KeyboardInterrupt:
            if viewer.paused:
                raise
            viewer.toggle_pause()
            print("Paused; logs are still being collected. Press Ctrl+C again to exit")


def cmd_login(args, cfg):
    path = save_token(args.token, cfg['token_path'])
    print(f"Token saved to {path}")
    return 0


def cmd_containers(args, cfg, client, token):
    if not token:
        print("No auth token found; run 'login' first.", file=sys.stderr)
        return 1
    rows = client.list_containers(token)
    print(f"{'ID':<12}  {'NAME':<24}  {'IMAGE':<32}  {'STATE':<10}  STATUS")
    for c in rows:
        print(f"{c.get('id', '')[:12]:<12}  {c.get('name', ''):<24}  {c.get('image', ''):<32}  "
              f"{c.get('state', ''):<10}  {c.get('status', '')}")
    return 0


def cmd_logs(args, cfg, client, token):
    done = threading.Event()
    viewer = LogViewer(
        client,
        container_logs(args.container),
        token,
        query=query_from_args(args, cfg),
        capacity=cfg['buffer_capacity'],
    )
    viewer.set_filter(args.quick or args.filter)
    if args.preset:
        viewer.select_preset(args.preset)
    else:
        viewer.start()
    try:
        follow(viewer, cfg, done)
    except KeyboardInterrupt:
        print('Exiting...')
    finally:
        viewer.close()
        if args.export_dir:
            path = viewer.export(args.export_dir)
            print(f"Exported to {path}" if path else "Nothing to export.")
    return 1 if viewer.status == SessionState.ERROR else 0


def cmd_update(args, cfg, client, token):
    done = threading.Event()
    result = {}

    def reload():
        try:
            result['version'] = client.get_version(token)
        except requests.RequestException as e:
            result['version'] = f"unknown ({e})"
        finally:
            done.set()

    preamble = []
    if token:
        try:
            message = client.trigger_update(token)
        except requests.RequestException as e:
            print(f"Update trigger failed: {e}", file=sys.stderr)
            return 1
        lines = message.strip().splitlines() or ['']
        preamble.append(f"Update triggered: {lines[0]}")
        preamble.extend(lines[1:])

    viewer = LogViewer(
        client,
        deployment_logs(),
        token,
        capacity=cfg['buffer_capacity'],
        on_reload=reload,
        reload_delay=float(cfg['reload_delay_seconds']),
    )
    viewer.start(preamble)
    try:
        follow(viewer, cfg, done)
    except KeyboardInterrupt:
        print('Exiting...')
    finally:
        viewer.close()
    if 'version' in result:
        print(f"Update complete. Agent version: {result['version']}")
        return 0
    if viewer.status == SessionState.COMPLETE:
        print("Update complete. Agent version could not be read.", file=sys.stderr)
        return 1
    return 1 if viewer.status == SessionState.ERROR else 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2

    if args.command == 'login':
        return cmd_login(args, cfg)

    client = AgentClient(cfg['base_url'], timeout=cfg['request_timeout_seconds'])
    token = read_token(cfg['token_path'])
    try:
        if args.command == 'containers':
            return cmd_containers(args, cfg, client, token)
        if args.command == 'logs':
            return cmd_logs(args, cfg, client, token)
        return cmd_update(args, cfg, client, token)
    except requests.RequestException as e:
        print(f"Request failed: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
