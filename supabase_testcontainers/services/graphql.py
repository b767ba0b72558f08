# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Supabase's Postgres image, which ships the pg_graphql extension.

GraphQL is served from inside the database through `graphql.resolve()`, so
the container only exposes the standard Postgres port.
"""

from types import MappingProxyType

from supabase_testcontainers.service import LogMatch, Service


class GraphQL(Service):
    SERVICE = "graphql"
    # POSTGRES_HOST is deliberately unset: it breaks the image's init scripts.
    DEFAULTS = MappingProxyType(
        {
            "POSTGRES_DB": "postgres",
            "POSTGRES_USER": "postgres",
            "POSTGRES_PASSWORD": "postgres",
        }
    )
    # Init scripts run in the foreground, so the schema is ready by now.
    READINESS = LogMatch(
        "database system is ready to accept connections", stream="stderr"
    )

    def with_database(self, database: str) -> "GraphQL":
        return self.with_env("POSTGRES_DB", database)

    def with_user(self, user: str) -> "GraphQL":
        return self.with_env("POSTGRES_USER", user)

    def with_password(self, password: str) -> "GraphQL":
        return self.with_env("POSTGRES_PASSWORD", password)

    def with_host(self, host: str) -> "GraphQL":
        return self.with_env("POSTGRES_HOST", host)

    def with_port(self, port: int) -> "GraphQL":
        return self.with_env("POSTGRES_PORT", port)

    def with_host_auth_method(self, method: str) -> "GraphQL":
        return self.with_env("POSTGRES_HOST_AUTH_METHOD", method)

    def with_postgres_args(self, args: str) -> "GraphQL":
        return self.with_env("POSTGRES_INITDB_ARGS", args)

    def with_jwt_secret(self, secret: str) -> "GraphQL":
        return self.with_env("JWT_SECRET", secret)

    def connection_string_template(self) -> str:
        """A connection string with literal `{host}` and `{port}` placeholders."""
        user = self._env.get("POSTGRES_USER", "postgres")
        password = self._env.get("POSTGRES_PASSWORD", "postgres")
        database = self._env.get("POSTGRES_DB", "postgres")
        return f"postgres://{user}:{password}@{{host}}:{{port}}/{database}"

    def connection_string(self, host: str, port: int) -> str:
        return self.connection_string_template().format(host=host, port=port)
