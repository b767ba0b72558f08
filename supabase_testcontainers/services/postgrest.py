# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

from types import MappingProxyType

from supabase_testcontainers.consts import POSTGREST_PORT
from supabase_testcontainers.service import LogMatch, Service


class PostgREST(Service):
    """A REST API generated from a Postgres schema."""

    SERVICE = "postgrest"
    DEFAULTS = MappingProxyType(
        {
            "PGRST_DB_SCHEMAS": "public",
            "PGRST_DB_ANON_ROLE": "anon",
            "PGRST_SERVER_PORT": str(POSTGREST_PORT),
            "PGRST_SERVER_HOST": "0.0.0.0",
        }
    )
    # PostgREST logs to stderr.
    READINESS = LogMatch("Listening on port", stream="stderr")

    def with_postgres_connection(self, connection_string: str) -> "PostgREST":
        return self.with_env("PGRST_DB_URI", connection_string)

    def with_db_schemas(self, schemas: str) -> "PostgREST":
        """A comma-separated list of exposed schemas."""
        return self.with_env("PGRST_DB_SCHEMAS", schemas)

    def with_db_anon_role(self, role: str) -> "PostgREST":
        return self.with_env("PGRST_DB_ANON_ROLE", role)

    def with_jwt_secret(self, secret: str) -> "PostgREST":
        return self.with_env("PGRST_JWT_SECRET", secret)

    def with_jwt_role_claim_key(self, key: str) -> "PostgREST":
        return self.with_env("PGRST_JWT_ROLE_CLAIM_KEY", key)

    def with_openapi_mode(self, mode: str) -> "PostgREST":
        return self.with_env("PGRST_OPENAPI_MODE", mode)

    def with_max_rows(self, max_rows: int) -> "PostgREST":
        return self.with_env("PGRST_DB_MAX_ROWS", max_rows)

    def with_pre_request(self, function_name: str) -> "PostgREST":
        return self.with_env("PGRST_DB_PRE_REQUEST", function_name)

    def with_log_level(self, level: str) -> "PostgREST":
        return self.with_env("PGRST_LOG_LEVEL", level)
