# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Exceptions raised while launching and preparing service containers.

Every error names the component that failed, so a broken launch never leaves
the caller guessing whether the dependency, the initializer or the target
service was at fault.
"""

from collections.abc import Iterable, Sequence

from supabase_testcontainers.ui import UIError


class SupabaseTestcontainersError(UIError):
    """All errors raised by this package are SupabaseTestcontainersErrors"""


class NotReady(SupabaseTestcontainersError):
    """A container did not satisfy its readiness condition in time.

    Attributes:
        service: The name of the service that was being waited on.
        reason: What was being waited for and how long.
        tail: The last log lines (or HTTP errors) observed before giving up.
    """

    def __init__(self, service: str, reason: str, tail: Sequence[str] = ()):
        self.service = service
        self.reason = reason
        self.tail = list(tail)
        message = f"service {service!r} not ready: {reason}"
        if self.tail:
            message += "\nlast output:\n" + "\n".join(
                f"  {line}" for line in self.tail
            )
        super().__init__(message, hint="check the container logs for a crash")


class SchemaInitFailed(SupabaseTestcontainersError):
    """Schema initialization failed at `step`."""

    def __init__(self, step: str, cause: str):
        self.step = step
        self.cause = cause
        super().__init__(f"schema initialization: {step} failed: {cause}")


class LaunchFailed(SupabaseTestcontainersError):
    """The container runtime could not pull or start an image."""

    def __init__(self, service: str, cause: str):
        self.service = service
        self.cause = cause
        super().__init__(
            f"failed to launch service {service!r}: {cause}",
            hint="is the Docker daemon running?",
        )


class PortNotExposed(SupabaseTestcontainersError):
    def __init__(self, service: str, port: int, exposed: Iterable[int]):
        self.service = service
        self.port = port
        self.exposed = sorted(exposed)
        super().__init__(
            f"service {service!r} is not exposing port {port!r}",
            hint="exposed ports: " + ", ".join(str(p) for p in self.exposed),
        )


class StackFailed(SupabaseTestcontainersError):
    """A multi-container stack failed while bringing up `component`."""

    def __init__(self, component: str, cause: Exception):
        self.component = component
        self.cause = cause
        super().__init__(f"{component}: {cause}", hint=getattr(cause, "hint", None))
