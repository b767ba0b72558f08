# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Launch service descriptors as Docker containers.

This is a thin layer over the Docker SDK: it turns a `ServiceDescriptor`
into a running container on a network, waits for its readiness condition,
resolves published ports and guarantees teardown.
"""

import codecs
import logging
import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

import docker
from docker.errors import DockerException, ImageNotFound, NotFound

from supabase_testcontainers import ui
from supabase_testcontainers.config import Settings
from supabase_testcontainers.consts import LOCAL_HOST
from supabase_testcontainers.errors import LaunchFailed, PortNotExposed
from supabase_testcontainers.readiness import wait_for_http, wait_for_log
from supabase_testcontainers.service import (
    HttpProbe,
    Image,
    LogMatch,
    ServiceDescriptor,
)

LOGGER = logging.getLogger(__name__)


def docker_client() -> docker.DockerClient:
    try:
        return docker.from_env()
    except DockerException as e:
        raise LaunchFailed("docker", str(e)) from e


class Network:
    """A user-defined bridge network, removed on exit.

    Containers on the network reach each other by service name.
    """

    def __init__(self, name: str, client: docker.DockerClient | None = None):
        self.name = name
        self.client = client or docker_client()
        self._network: Any = None

    def create(self) -> "Network":
        ui.header(f"creating network {self.name}")
        try:
            self._network = self.client.networks.create(self.name, driver="bridge")
        except DockerException as e:
            raise LaunchFailed(f"network {self.name}", str(e)) from e
        return self

    def connect(self, container: Any, alias: str) -> None:
        assert self._network is not None, "network not created"
        self._network.connect(container, aliases=[alias])

    def remove(self) -> None:
        if self._network is None:
            return
        try:
            self._network.remove()
        except NotFound:
            pass
        except DockerException as e:
            ui.warn(f"failed to remove network {self.name}: {e}")
        self._network = None

    def __enter__(self) -> "Network":
        return self.create()

    def __exit__(self, *exc: Any) -> None:
        self.remove()


class LogStream:
    """The combined stdout/stderr of a container, split into lines.

    Closing the stream closes the underlying connection, which unblocks a
    reader waiting on it from another thread.
    """

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks = chunks

    def __iter__(self) -> Iterator[str]:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        buffer = ""
        for chunk in self._chunks:
            buffer += decoder.decode(chunk)
            *lines, buffer = buffer.split("\n")
            yield from lines
        buffer += decoder.decode(b"", final=True)
        if buffer:
            yield buffer

    def close(self) -> None:
        close = getattr(self._chunks, "close", None)
        if close is not None:
            close()


class RunningContainer:
    """A started container, owned by whoever started it.

    Attributes:
        descriptor: The descriptor the container was launched from.
    """

    def __init__(self, descriptor: ServiceDescriptor, container: Any):
        self.descriptor = descriptor
        self._container = container
        self._stopped = False

    @property
    def id(self) -> str:
        return self._container.id

    @property
    def name(self) -> str:
        return self.descriptor.name

    def mapped_port(self, internal_port: int) -> int:
        """The host port published for `internal_port`.

        Raises:
            PortNotExposed: If the descriptor never declared the port, or the
                container no longer publishes it.
            LaunchFailed: If the container can no longer be inspected, for
                example because it exited and was removed.
        """
        if internal_port not in self.descriptor.exposed_ports:
            raise PortNotExposed(
                self.name, internal_port, self.descriptor.exposed_ports
            )
        try:
            self._container.reload()
        except DockerException as e:
            raise LaunchFailed(self.name, str(e)) from e
        ports = self._container.attrs["NetworkSettings"]["Ports"] or {}
        bindings = ports.get(f"{internal_port}/tcp")
        if not bindings:
            raise PortNotExposed(
                self.name, internal_port, self.descriptor.exposed_ports
            )
        return int(bindings[0]["HostPort"])

    def url(self, internal_port: int, scheme: str = "http") -> str:
        return f"{scheme}://{LOCAL_HOST}:{self.mapped_port(internal_port)}"

    def logs(self) -> LogStream:
        """Follow the container's output from its start. Reopen to restart."""
        return LogStream(
            self._container.logs(stream=True, follow=True, stdout=True, stderr=True)
        )

    def log_text(self) -> str:
        return self._container.logs(stdout=True, stderr=True).decode(
            "utf-8", errors="replace"
        )

    def stop(self) -> None:
        """Stop and remove the container. Safe to call more than once."""
        if self._stopped:
            return
        LOGGER.info("removing container %s (%s)", self.name, self.id)
        try:
            self._container.remove(force=True, v=True)
        except NotFound:
            pass
        except DockerException as e:
            # Keep tearing down the rest of the stack.
            ui.warn(f"failed to remove container {self.name} ({self.id}): {e}")
        self._stopped = True

    def __enter__(self) -> "RunningContainer":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()


def _ensure_image(client: docker.DockerClient, descriptor: ServiceDescriptor) -> None:
    try:
        client.images.get(descriptor.image)
    except ImageNotFound:
        ui.say(f"pulling {descriptor.image}")
        client.images.pull(descriptor.image_repository, tag=descriptor.image_tag)


def start_container(
    image: Image,
    network: Network | None = None,
    client: docker.DockerClient | None = None,
    container_name: str | None = None,
) -> RunningContainer:
    """Start a container for `image` without waiting for it to be ready.

    Every exposed port is published on an ephemeral port bound to
    127.0.0.1. On a network, the container is reachable by its service name.

    Raises:
        LaunchFailed: If the image cannot be pulled or the container started.
    """
    descriptor = image.descriptor()
    if client is None:
        client = network.client if network is not None else docker_client()
    settings = Settings.from_env()
    container_name = container_name or f"{descriptor.name}-{uuid.uuid4().hex[:8]}"

    ui.header(f"starting {descriptor.name} ({descriptor.image})")
    container = None
    try:
        _ensure_image(client, descriptor)
        container = client.containers.create(
            descriptor.image,
            command=(
                list(descriptor.startup_command)
                if descriptor.startup_command is not None
                else None
            ),
            environment=descriptor.env,
            ports={
                f"{port}/tcp": ("127.0.0.1", None)
                for port in descriptor.exposed_ports
            },
            labels=dict(descriptor.labels),
            extra_hosts=(
                {"host.docker.internal": "host-gateway"}
                if settings.host_gateway
                else None
            ),
            name=container_name,
            detach=True,
        )
        if network is not None:
            network.connect(container, alias=descriptor.name)
        container.start()
    except DockerException as e:
        _discard(container, descriptor.name)
        raise LaunchFailed(descriptor.name, str(e)) from e
    except BaseException:
        _discard(container, descriptor.name)
        raise

    return RunningContainer(descriptor, container)


def _discard(container: Any, name: str) -> None:
    """Remove a container that failed to start, keeping the original error."""
    if container is None:
        return
    try:
        container.remove(force=True)
    except DockerException as e:
        ui.warn(f"failed to remove container {name} ({container.id}): {e}")


def wait_until_ready(
    container: RunningContainer, timeout: float | None = None
) -> None:
    """Block until the container satisfies its readiness condition.

    Raises:
        NotReady: If it did not within `timeout` seconds.
    """
    readiness = container.descriptor.readiness
    if isinstance(readiness, LogMatch):
        wait_for_log(
            container.logs(),
            readiness.pattern,
            timeout=timeout,
            service=container.name,
            occurrences=readiness.occurrences,
        )
    elif isinstance(readiness, HttpProbe):
        port = readiness.port or min(container.descriptor.exposed_ports)
        wait_for_http(
            f"{container.url(port)}{readiness.path}",
            expected_status=readiness.expected_status,
            timeout=timeout,
            service=container.name,
        )
    else:
        raise TypeError(f"unknown readiness condition {readiness!r}")


@contextmanager
def launch(
    image: Image,
    network: Network | None = None,
    timeout: float | None = None,
    client: docker.DockerClient | None = None,
) -> Iterator[RunningContainer]:
    """Start `image`, wait until it is ready and remove it on exit.

    The container is removed on every exit path, including readiness
    timeouts.
    """
    container = start_container(image, network=network, client=client)
    try:
        wait_until_ready(container, timeout=timeout)
        yield container
    finally:
        container.stop()
