# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

from types import MappingProxyType

from supabase_testcontainers.consts import ANALYTICS_PORT
from supabase_testcontainers.service import LogMatch, Service


class Analytics(Service):
    """Supabase Analytics (Logflare) in single-tenant, Postgres-backed mode."""

    SERVICE = "analytics"
    DEFAULTS = MappingProxyType(
        {
            "PHX_HTTP_PORT": str(ANALYTICS_PORT),
            "LOGFLARE_NODE_HOST": "127.0.0.1",
            # Self-hosted Logflare requires single-tenant mode.
            "LOGFLARE_SINGLE_TENANT": "true",
            "LOGFLARE_SUPABASE_MODE": "true",
            "DB_SCHEMA": "_analytics",
            "POSTGRES_BACKEND_SCHEMA": "_analytics",
            "LOGFLARE_FEATURE_FLAG_OVERRIDE": "multibackend=true",
        }
    )
    # TODO: Logflare logs this before migrating, not once it serves HTTP.
    # Switch to an HttpProbe on /health once verified against a real boot.
    READINESS = LogMatch("Starting migration", stream="stdout")

    def with_postgres_backend_url(self, url: str) -> "Analytics":
        return self.with_env("POSTGRES_BACKEND_URL", url)

    def with_postgres_backend_schema(self, schema: str) -> "Analytics":
        return self.with_env("POSTGRES_BACKEND_SCHEMA", schema)

    def with_db_hostname(self, hostname: str) -> "Analytics":
        return self.with_env("DB_HOSTNAME", hostname)

    def with_db_port(self, port: int) -> "Analytics":
        return self.with_env("DB_PORT", port)

    def with_db_username(self, username: str) -> "Analytics":
        return self.with_env("DB_USERNAME", username)

    def with_db_password(self, password: str) -> "Analytics":
        return self.with_env("DB_PASSWORD", password)

    def with_db_database(self, database: str) -> "Analytics":
        return self.with_env("DB_DATABASE", database)

    def with_db_schema(self, schema: str) -> "Analytics":
        return self.with_env("DB_SCHEMA", schema)

    def with_public_access_token(self, token: str) -> "Analytics":
        return self.with_env("LOGFLARE_PUBLIC_ACCESS_TOKEN", token)

    def with_private_access_token(self, token: str) -> "Analytics":
        return self.with_env("LOGFLARE_PRIVATE_ACCESS_TOKEN", token)

    def with_encryption_key(self, key: str) -> "Analytics":
        return self.with_env("LOGFLARE_DB_ENCRYPTION_KEY", key)

    def with_node_host(self, host: str) -> "Analytics":
        return self.with_env("LOGFLARE_NODE_HOST", host)

    def with_single_tenant(self, enabled: bool) -> "Analytics":
        return self.with_env("LOGFLARE_SINGLE_TENANT", enabled)

    def with_supabase_mode(self, enabled: bool) -> "Analytics":
        return self.with_env("LOGFLARE_SUPABASE_MODE", enabled)

    def with_feature_flag_override(self, flags: str) -> "Analytics":
        return self.with_env("LOGFLARE_FEATURE_FLAG_OVERRIDE", flags)

    def with_log_level(self, level: str) -> "Analytics":
        return self.with_env("LOGFLARE_LOG_LEVEL", level)

    def with_http_port(self, port: int) -> "Analytics":
        return self.with_env("PHX_HTTP_PORT", port)
