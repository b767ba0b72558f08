# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Descriptors for containerized services and the builders that produce them.

A `Service` is a fluent builder: every `with_*` call returns a new builder
with the change applied, leaving the original untouched. Calling
`descriptor()` freezes the builder's current state into a
`ServiceDescriptor`, an immutable value with a deterministic (key-sorted)
environment that can be handed to the orchestrator or rendered as a Docker
Compose service.
"""

import copy
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import (
    Any,
    Literal,
    Protocol,
    TypedDict,
    TypeVar,
    Union,
    runtime_checkable,
)

import yaml

from supabase_testcontainers.config import Settings
from supabase_testcontainers.consts import IMAGES, ImageDefaults


@dataclass(frozen=True)
class LogMatch:
    """Ready once `pattern` appears as a substring of the container's output.

    `occurrences` is how many matching lines must be seen. `stream` records
    which stream the service is known to log the message on; the orchestrator
    matches against the combined stdout/stderr stream.
    """

    pattern: str
    stream: Literal["stdout", "stderr", "any"] = "any"
    occurrences: int = 1


@dataclass(frozen=True)
class HttpProbe:
    """Ready once `GET path` on the published port returns `expected_status`.

    If `port` is unset, the service's lowest exposed port is probed.
    """

    path: str
    expected_status: int = 200
    port: int | None = None


Readiness = Union[LogMatch, HttpProbe]


class ServiceHealthcheck(TypedDict, total=False):
    """Configuration for a check to determine whether the containers for this
    service are healthy."""

    test: list[str] | str
    interval: str
    timeout: str
    retries: int
    start_period: str


class ServiceConfig(TypedDict, total=False):
    """The definition of a service in Docker Compose.

    This object corresponds directly to the YAML definition in a
    docker-compose.yml file. Full details are available in [Services top-level
    element][ref] chapter of the Compose Specification.

    [ref]: https://github.com/compose-spec/compose-spec/blob/master/spec.md#services-top-level-element
    """

    image: str
    command: list[str]
    ports: Sequence[int | str]
    environment: list[str]
    extra_hosts: list[str]
    healthcheck: ServiceHealthcheck
    labels: dict[str, Any]


@dataclass(frozen=True)
class ServiceDescriptor:
    """Everything needed to launch one container.

    Attributes:
        name: The name of the service, also used as its network alias.
        image_repository: The image family. Fixed per service.
        image_tag: The image tag.
        environment: `(key, value)` pairs, sorted by key.
        exposed_ports: Container ports to publish on ephemeral host ports.
        readiness: The condition that marks the container as booted.
        startup_command: Replaces the image's default command, if set.
    """

    name: str
    image_repository: str
    image_tag: str
    environment: tuple[tuple[str, str], ...]
    exposed_ports: frozenset[int]
    readiness: Readiness
    startup_command: tuple[str, ...] | None = None
    labels: Mapping[str, str] = field(default_factory=dict, compare=False)

    @property
    def image(self) -> str:
        return f"{self.image_repository}:{self.image_tag}"

    @property
    def env(self) -> dict[str, str]:
        return dict(self.environment)

    def env_list(self) -> list[str]:
        """The environment in `NAME=VALUE` form."""
        return [f"{key}={value}" for key, value in self.environment]

    def to_compose(self, host_gateway: bool | None = None) -> ServiceConfig:
        """Render as a Docker Compose service.

        `host_gateway` defaults to `SUPABASE_TC_DOCKER_HOST_GATEWAY`, matching
        containers started by the orchestrator.
        """
        if host_gateway is None:
            host_gateway = Settings.from_env().host_gateway
        config: ServiceConfig = {
            "image": self.image,
            # Only bind to localhost, on an ephemeral host port.
            "ports": [f"127.0.0.1::{port}" for port in sorted(self.exposed_ports)],
            "environment": self.env_list(),
        }
        if host_gateway:
            config["extra_hosts"] = ["host.docker.internal:host-gateway"]
        if self.startup_command is not None:
            config["command"] = list(self.startup_command)
        if isinstance(self.readiness, HttpProbe):
            port = self.readiness.port or min(self.exposed_ports)
            config["healthcheck"] = {
                "test": [
                    "CMD",
                    "curl",
                    "--fail",
                    f"http://localhost:{port}{self.readiness.path}",
                ],
                "interval": "1s",
                "start_period": "30s",
            }
        if self.labels:
            config["labels"] = dict(self.labels)
        return config


def render_compose(
    descriptors: Iterable[ServiceDescriptor], host_gateway: bool | None = None
) -> str:
    """Render descriptors as a docker-compose.yml document."""
    if host_gateway is None:
        host_gateway = Settings.from_env().host_gateway
    compose = {
        "services": {
            descriptor.name: dict(descriptor.to_compose(host_gateway))
            for descriptor in descriptors
        }
    }
    return yaml.dump(compose, default_flow_style=False, sort_keys=True)


@runtime_checkable
class Image(Protocol):
    """The capabilities the orchestrator needs from a service builder."""

    @property
    def name(self) -> str:
        ...

    @property
    def tag(self) -> str:
        ...

    def descriptor(self) -> ServiceDescriptor:
        ...

    def exposed_ports(self) -> frozenset[int]:
        ...

    def readiness(self) -> Readiness:
        ...


def env_value(value: str | bool | int) -> str:
    """Render a typed setting the way the services parse it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


S = TypeVar("S", bound="Service")


class Service:
    """A builder for the descriptor of one service.

    Subclasses set `SERVICE` (a key into `consts.IMAGES`), `DEFAULTS` (the
    environment the service starts from) and `READINESS`, and add typed
    setters that funnel into `with_env`.

    Attributes:
        name: The name of the service.
    """

    SERVICE: str
    DEFAULTS: Mapping[str, str] = {}
    READINESS: Readiness

    def __init__(
        self,
        environment: Mapping[str, str | bool | int] = {},
        name: str | None = None,
    ) -> None:
        self.name = name or self.SERVICE
        self._tag = self.image_defaults().tag
        self._env: dict[str, str] = dict(self.DEFAULTS)
        for key, value in environment.items():
            self._env[key] = env_value(value)
        self._command: tuple[str, ...] | None = None
        self._extra_ports: frozenset[int] = frozenset()

    @classmethod
    def image_defaults(cls) -> ImageDefaults:
        return IMAGES[cls.SERVICE]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, image={self.image!r})"

    def _replace(self: S) -> S:
        clone = copy.copy(self)
        clone._env = dict(self._env)
        return clone

    @property
    def image_repository(self) -> str:
        return self.image_defaults().repository

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def image(self) -> str:
        return f"{self.image_repository}:{self._tag}"

    @property
    def env_vars(self) -> dict[str, str]:
        """A sorted copy of the environment as currently configured."""
        return dict(sorted(self._env.items()))

    def with_env(self: S, key: str, value: str | bool | int) -> S:
        """Set any environment variable. The last write to a key wins."""
        clone = self._replace()
        clone._env[key] = env_value(value)
        return clone

    def with_envs(self: S, environment: Mapping[str, str | bool | int]) -> S:
        clone = self._replace()
        for key, value in environment.items():
            clone._env[key] = env_value(value)
        return clone

    def with_tag(self: S, tag: str) -> S:
        clone = self._replace()
        clone._tag = tag
        return clone

    def with_name(self: S, name: str) -> S:
        clone = self._replace()
        clone.name = name
        return clone

    def with_command(self: S, command: Sequence[str]) -> S:
        """Override the image's default command."""
        clone = self._replace()
        clone._command = tuple(command)
        return clone

    def with_exposed_port(self: S, port: int) -> S:
        clone = self._replace()
        clone._extra_ports = clone._extra_ports | {port}
        return clone

    def command(self) -> tuple[str, ...] | None:
        return self._command

    def exposed_ports(self) -> frozenset[int]:
        return frozenset({self.image_defaults().port}) | self._extra_ports

    def readiness(self) -> Readiness:
        return self.READINESS

    def descriptor(self) -> ServiceDescriptor:
        return ServiceDescriptor(
            name=self.name,
            image_repository=self.image_repository,
            image_tag=self._tag,
            environment=tuple(sorted(self._env.items())),
            exposed_ports=self.exposed_ports(),
            readiness=self.readiness(),
            startup_command=self.command(),
            labels={"supabase-testcontainers.service": self.SERVICE},
        )
