# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Block until a container reports that it has booted.

Both waits are bounded by a timeout and never retry once they have given
up: the caller decides whether to relaunch.
"""

import logging
import threading
import time
from collections import deque
from collections.abc import Iterable
from queue import Empty, Queue
from typing import Any

import requests

from supabase_testcontainers import ui
from supabase_testcontainers.config import Settings
from supabase_testcontainers.errors import NotReady

LOGGER = logging.getLogger(__name__)

TAIL_LINES = 20

_EOF = object()


def _timeout(timeout: float | None) -> float:
    return Settings.from_env().ready_timeout if timeout is None else timeout


def wait_for_log(
    lines: Iterable[str],
    pattern: str,
    timeout: float | None = None,
    service: str = "service",
    occurrences: int = 1,
) -> str:
    """Wait for `occurrences` lines containing `pattern` to appear in `lines`.

    `lines` may block and may never end, so it is drained on a reader thread.
    If it has a `close` method, that method is called on every exit path and
    must be safe to call from this thread while the reader is blocked.

    Returns:
        The last matching line.

    Raises:
        NotReady: If no line matched within `timeout` seconds or the stream
            ended first. Carries the last lines observed.
    """
    timeout = _timeout(timeout)
    tail: deque[str] = deque(maxlen=TAIL_LINES)
    items: Queue[Any] = Queue()
    done = threading.Event()

    def pump() -> None:
        try:
            for line in lines:
                items.put(line)
                if done.is_set():
                    return
        except Exception as e:
            items.put(e)
        finally:
            items.put(_EOF)

    reader = threading.Thread(target=pump, name=f"logs-{service}", daemon=True)
    ui.progress(f"waiting for {service} to log {pattern!r} ... ")
    reader.start()
    deadline = time.monotonic() + timeout
    matches = 0
    try:
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                ui.progress(finish=True)
                raise NotReady(
                    service, f"{pattern!r} not logged within {timeout:g}s", tail
                )
            try:
                item = items.get(timeout=remaining)
            except Empty:
                continue
            if item is _EOF:
                ui.progress(finish=True)
                raise NotReady(
                    service, f"log stream ended before {pattern!r} was logged", tail
                )
            if isinstance(item, Exception):
                ui.progress(finish=True)
                raise NotReady(service, f"log stream failed: {item}", tail) from item
            line = item.rstrip("\r\n")
            tail.append(line)
            if pattern in line:
                matches += 1
            if matches >= occurrences:
                ui.progress("ready!", finish=True)
                LOGGER.debug("%s matched readiness line: %s", service, line)
                return line
    finally:
        done.set()
        close = getattr(lines, "close", None)
        if close is not None:
            close()


def wait_for_http(
    url: str,
    expected_status: int = 200,
    timeout: float | None = None,
    tick: float = 0.5,
    service: str = "service",
    session: requests.Session | None = None,
) -> None:
    """Poll `url` until it answers with `expected_status`.

    Raises:
        NotReady: If the status was not observed within `timeout` seconds.
            Carries the last HTTP status or connection error.
    """
    timeout = _timeout(timeout)
    last_error: str | None = None
    ui.progress(f"waiting for {service} at {url} ... ")
    http = session or requests.Session()
    try:
        for remaining in ui.timeout_loop(timeout, tick=tick):
            try:
                response = http.get(url, timeout=max(0.1, min(remaining, 5.0)))
            except requests.RequestException as e:
                last_error = str(e)
                continue
            with response:
                if response.status_code == expected_status:
                    ui.progress("ready!", finish=True)
                    return
                last_error = f"HTTP {response.status_code}: {response.reason}"
    finally:
        if session is None:
            http.close()

    ui.progress(finish=True)
    raise NotReady(
        service,
        f"GET {url} did not return {expected_status} within {timeout:g}s",
        [last_error] if last_error else [],
    )
