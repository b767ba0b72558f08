# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

import os
from dataclasses import dataclass

from supabase_testcontainers.ui import UIError, env_is_truthy

DEFAULT_READY_TIMEOUT_SECS = 60.0
DEFAULT_CONNECT_TIMEOUT_SECS = 30.0


def _env_seconds(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        seconds = float(value)
    except ValueError:
        raise UIError(f"{name} must be a number of seconds, got {value!r}")
    if seconds <= 0:
        raise UIError(f"{name} must be positive, got {value!r}")
    return seconds


@dataclass(frozen=True)
class Settings:
    """Process-wide knobs, read from the environment.

    Explicit `timeout` arguments passed to the readiness and schema helpers
    always take precedence over these values.
    """

    ready_timeout: float = DEFAULT_READY_TIMEOUT_SECS
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_SECS
    host_gateway: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            ready_timeout=_env_seconds(
                "SUPABASE_TC_READY_TIMEOUT", DEFAULT_READY_TIMEOUT_SECS
            ),
            connect_timeout=_env_seconds(
                "SUPABASE_TC_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT_SECS
            ),
            host_gateway=env_is_truthy("SUPABASE_TC_DOCKER_HOST_GATEWAY", True),
        )
