# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from _pytest.config import Config

import pytest
from docker.errors import ImageNotFound, NotFound

from supabase_testcontainers import ui


def pytest_configure(config: "Config") -> None:
    config.addinivalue_line(
        "markers",
        "integration: Starts real containers. Requires a Docker daemon; deselect with -m 'not integration'",
    )


@pytest.fixture(autouse=True)
def quiet() -> Any:
    ui.Verbosity.quiet = True
    yield
    ui.Verbosity.quiet = False


class FakeChunks:
    """Stands in for the Docker SDK's cancellable log stream."""

    def __init__(self, chunks: list[bytes]):
        self.chunks = chunks
        self.closed = False

    def __iter__(self) -> Any:
        return iter(self.chunks)

    def close(self) -> None:
        self.closed = True


class FakeContainer:
    def __init__(self, client: "FakeDockerClient", image: str, kwargs: dict[str, Any]):
        self.client = client
        self.id = f"container{len(client.containers.created)}"
        self.image = image
        self.kwargs = kwargs
        self.started = False
        self.removed = 0
        self.streams: list[FakeChunks] = []
        self.attrs: dict[str, Any] = {"NetworkSettings": {"Ports": None}}

    def start(self) -> None:
        if self.client.start_error is not None:
            raise self.client.start_error
        self.started = True

    def reload(self) -> None:
        if self.client.reload_error is not None:
            raise self.client.reload_error
        self.attrs["NetworkSettings"]["Ports"] = {
            port: [{"HostIp": "127.0.0.1", "HostPort": str(49000 + i)}]
            for i, port in enumerate(sorted(self.kwargs["ports"]))
        }

    def logs(self, stream: bool = False, **kwargs: Any) -> Any:
        output = self.client.log_output.get(self.image, [])
        if not stream:
            return b"".join(output)
        chunks = FakeChunks(output)
        self.streams.append(chunks)
        return chunks

    def remove(self, force: bool = False, v: bool = False) -> None:
        self.removed += 1
        if self.client.remove_error is not None:
            raise self.client.remove_error
        if self.removed > 1:
            raise NotFound("no such container")


class FakeContainers:
    def __init__(self, client: "FakeDockerClient"):
        self.client = client
        self.created: list[FakeContainer] = []
        self.fail_with: Exception | None = None

    def create(self, image: str, **kwargs: Any) -> FakeContainer:
        if self.fail_with is not None:
            raise self.fail_with
        container = FakeContainer(self.client, image, kwargs)
        self.created.append(container)
        return container


class FakeImages:
    def __init__(self) -> None:
        self.present: set[str] = set()
        self.pulled: list[tuple[str, str]] = []

    def get(self, image: str) -> str:
        if image not in self.present:
            raise ImageNotFound(f"no such image: {image}")
        return image

    def pull(self, repository: str, tag: str) -> None:
        self.pulled.append((repository, tag))
        self.present.add(f"{repository}:{tag}")


class FakeNetwork:
    def __init__(self, name: str):
        self.name = name
        self.connected: list[tuple[FakeContainer, list[str]]] = []
        self.removed = False

    def connect(self, container: FakeContainer, aliases: list[str]) -> None:
        self.connected.append((container, aliases))

    def remove(self) -> None:
        self.removed = True


class FakeNetworks:
    def __init__(self) -> None:
        self.created: list[FakeNetwork] = []

    def create(self, name: str, driver: str) -> FakeNetwork:
        network = FakeNetwork(name)
        self.created.append(network)
        return network


class FakeDockerClient:
    """Just enough of `docker.DockerClient` to launch containers.

    `log_output` maps an image to the output its containers produce. Setting
    one of the `*_error` attributes makes the matching container call raise it.
    """

    def __init__(self) -> None:
        self.containers = FakeContainers(self)
        self.images = FakeImages()
        self.networks = FakeNetworks()
        self.log_output: dict[str, list[bytes]] = {}
        self.start_error: Exception | None = None
        self.reload_error: Exception | None = None
        self.remove_error: Exception | None = None


@pytest.fixture
def docker_client() -> FakeDockerClient:
    return FakeDockerClient()
