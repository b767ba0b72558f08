# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

from types import MappingProxyType

from supabase_testcontainers.service import LogMatch, Service


class Postgres(Service):
    """A plain Postgres database for services to depend on.

    Logical replication is enabled so that Realtime can attach to it.
    """

    SERVICE = "postgres"
    DEFAULTS = MappingProxyType(
        {
            "POSTGRES_DB": "postgres",
            "POSTGRES_USER": "postgres",
            "POSTGRES_PASSWORD": "postgres",
        }
    )
    # Logged once by the temporary init server and again by the real one.
    READINESS = LogMatch(
        "database system is ready to accept connections",
        stream="stderr",
        occurrences=2,
    )

    max_wal_senders = 100
    max_replication_slots = 100
    max_connections = 5000

    def with_user(self, user: str) -> "Postgres":
        return self.with_env("POSTGRES_USER", user)

    def with_password(self, password: str) -> "Postgres":
        return self.with_env("POSTGRES_PASSWORD", password)

    def with_database(self, database: str) -> "Postgres":
        return self.with_env("POSTGRES_DB", database)

    def with_host_auth(self) -> "Postgres":
        """Accept connections without a password."""
        return self.with_env("POSTGRES_HOST_AUTH_METHOD", "trust")

    def with_max_connections(self, max_connections: int) -> "Postgres":
        clone = self._replace()
        clone.max_connections = max_connections
        return clone

    def command(self) -> tuple[str, ...]:
        explicit = super().command()
        if explicit is not None:
            return explicit
        return (
            "postgres",
            "-c",
            "wal_level=logical",
            "-c",
            f"max_wal_senders={self.max_wal_senders}",
            "-c",
            f"max_replication_slots={self.max_replication_slots}",
            "-c",
            f"max_connections={self.max_connections}",
        )

    def connection_string(self, host: str, port: int) -> str:
        user = self._env["POSTGRES_USER"]
        password = self._env["POSTGRES_PASSWORD"]
        database = self._env["POSTGRES_DB"]
        return f"postgres://{user}:{password}@{host}:{port}/{database}"
