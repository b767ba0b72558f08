# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Progress and error reporting for people watching a test run.

Everything here writes to stderr, so compose documents and other command
output on stdout stay machine-readable.
"""

import os
import sys
import time
from contextlib import contextmanager
from typing import Any, Callable, Generator, Optional

from colored import attr, fg


class Verbosity:
    """Whether progress lines are suppressed."""

    quiet: bool = False

    @classmethod
    def init_from_env(cls, explicit: Optional[bool]) -> None:
        """Read SUPABASE_TC_QUIET, unless the caller decided already."""
        if explicit is not None:
            cls.quiet = explicit
        else:
            cls.quiet = env_is_truthy("SUPABASE_TC_QUIET")


def speaker(prefix: str) -> Callable[..., None]:
    """Return a function printing `prefix` + message, silenced when quiet.

    The prefix is used verbatim, so include a trailing space if one is wanted:

        >>> step = speaker("auth> ")
        >>> step("migrations applied")  # doctest: +SKIP
        auth> migrations applied
    """

    def say(msg: str) -> None:
        if not Verbosity.quiet:
            print(prefix + msg, file=sys.stderr)

    return say


header = speaker("==> ")
say = speaker("")


def warn(message: str) -> None:
    # Shown even when quiet.
    print(f"{fg('yellow')}warning:{attr('reset')} {message}", file=sys.stderr)


def progress(
    msg: str = "", prefix: Optional[str] = None, *, finish: bool = False
) -> None:
    """Write part of a line, such as one dot per readiness poll.

    Pass `finish=True` to end the line.
    """
    if Verbosity.quiet:
        return
    text = msg if prefix is None else f"{prefix}> {msg}"
    print(text, file=sys.stderr, flush=True, end="\n" if finish else "")


def timeout_loop(timeout: float, tick: float = 1) -> Generator[float, None, None]:
    """Yield the seconds remaining until `timeout` elapses.

    The body runs at least once, and successive iterations start no closer
    together than `tick` seconds. The generator stops on its own once the
    deadline has passed; callers decide what running out means.
    """
    deadline = time.monotonic() + timeout
    while True:
        started = time.monotonic()
        yield deadline - started
        now = time.monotonic()
        if now >= deadline:
            return
        elapsed = now - started
        if tick > 0 and elapsed < tick:
            time.sleep(min(tick - elapsed, deadline - now))


def env_is_truthy(env_var: str, default: bool = False) -> bool:
    """Treat any value except "", "0" and "no" as true."""
    value = os.getenv(env_var)
    if value is None:
        return default
    return value not in ("", "0", "no")


class UIError(Exception):
    """A failure the person running the tests can act on.

    The message and `hint` are printed without a traceback by
    `error_handler`. Bugs in this package should raise something else.
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


@contextmanager
def error_handler(prog: str) -> Any:
    """Turn a `UIError` or Ctrl-C into a one-line report and exit status 1."""
    try:
        yield
    except UIError as e:
        print(f"{prog}: {fg('red')}error:{attr('reset')} {e}", file=sys.stderr)
        if e.hint:
            print(f"{attr('bold')}hint:{attr('reset')} {e.hint}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(1)
