# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Bring up a service together with the database it depends on.

The sequence is always: start the dependency, initialize its schema, start
the dependent service, and tear everything down in reverse on exit. A
failure in any phase is reported as a `StackFailed` naming that phase.
"""

import itertools
import time
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from typing import Any

import docker

from supabase_testcontainers import ui
from supabase_testcontainers.consts import AUTH_PORT, LOCAL_HOST, POSTGRES_PORT
from supabase_testcontainers.errors import StackFailed, SupabaseTestcontainersError
from supabase_testcontainers.orchestrator import Network, RunningContainer, launch
from supabase_testcontainers.schema import init_schema
from supabase_testcontainers.services.auth import AUTH_ADMIN_ROLE, Auth
from supabase_testcontainers.services.postgres import Postgres

TEST_NETWORK = "supabase-test-network"

_counter = itertools.count()


def unique_test_id() -> str:
    """An identifier unique within this process, for naming test resources."""
    return f"{int(time.time() * 1000)}-{next(_counter)}"


@contextmanager
def component(name: str) -> Iterator[None]:
    """Attribute any failure inside the block to the component `name`."""
    try:
        yield
    except StackFailed:
        raise
    except SupabaseTestcontainersError as e:
        raise StackFailed(name, e) from e


class AuthStack:
    """Postgres and Auth on a private network.

    Example::

        with AuthStack(Auth().with_signup_disabled(True)) as stack:
            requests.get(f"{stack.auth_url}/health")

    The stack overrides `DATABASE_URL` on the Auth builder to point at its
    own Postgres container.
    """

    def __init__(
        self,
        auth: Auth | None = None,
        postgres: Postgres | None = None,
        auth_admin_password: str = "testpassword",
        timeout: float | None = None,
        client: docker.DockerClient | None = None,
    ):
        self.auth_builder = auth or Auth()
        self.postgres_builder = postgres or Postgres()
        self.auth_admin_password = auth_admin_password
        self.timeout = timeout
        self.client = client
        self.postgres: RunningContainer | None = None
        self.auth: RunningContainer | None = None
        self._resources: ExitStack | None = None

    @property
    def postgres_port(self) -> int:
        assert self.postgres is not None, "stack not started"
        return self.postgres.mapped_port(POSTGRES_PORT)

    @property
    def auth_port(self) -> int:
        assert self.auth is not None, "stack not started"
        return self.auth.mapped_port(AUTH_PORT)

    @property
    def auth_url(self) -> str:
        return f"http://{LOCAL_HOST}:{self.auth_port}"

    def admin_connection_string(self) -> str:
        """Superuser access to the stack's database, from the host."""
        return self.postgres_builder.connection_string(LOCAL_HOST, self.postgres_port)

    def __enter__(self) -> "AuthStack":
        test_id = unique_test_id()
        resources = ExitStack()
        try:
            with component("network"):
                network = resources.enter_context(
                    Network(f"{TEST_NETWORK}-{test_id}", client=self.client)
                )

            with component("postgres"):
                postgres = resources.enter_context(
                    launch(self.postgres_builder, network, timeout=self.timeout)
                )
                self.postgres = postgres

            with component("schema initialization"):
                params = self.auth_builder.schema_init_params(
                    self.admin_connection_string(), self.auth_admin_password
                )
                init_schema(params, timeout=self.timeout)

            with component("auth"):
                db_url = (
                    self.postgres_builder.with_user(AUTH_ADMIN_ROLE)
                    .with_password(self.auth_admin_password)
                    .connection_string(postgres.name, POSTGRES_PORT)
                )
                self.auth = resources.enter_context(
                    launch(
                        self.auth_builder.with_db_url(db_url),
                        network,
                        timeout=self.timeout,
                    )
                )
        except BaseException:
            resources.close()
            raise

        self._resources = resources
        ui.header(f"auth stack ready at {self.auth_url}")
        return self

    def __exit__(self, *exc: Any) -> None:
        if self._resources is not None:
            self._resources.close()
            self._resources = None
        self.postgres = None
        self.auth = None
