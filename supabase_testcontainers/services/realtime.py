# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Supabase Realtime, which streams Postgres changes over WebSockets.

Realtime consumes logical replication, so the database it points at must run
with `wal_level=logical` (see `services.postgres.Postgres`).
"""

from types import MappingProxyType

from supabase_testcontainers.consts import REALTIME_PORT
from supabase_testcontainers.service import LogMatch, Service


class Realtime(Service):
    SERVICE = "realtime"
    DEFAULTS = MappingProxyType(
        {
            "PORT": str(REALTIME_PORT),
            # Required by the Phoenix runtime config.
            "APP_NAME": "realtime",
            "SLOT_NAME": "realtime_rls",
            "TEMPORARY_SLOT": "true",
            "SECURE_CHANNELS": "true",
            "REGION": "local",
            "TENANT_ID": "realtime-dev",
            "ERL_AFLAGS": "-proto_dist inet_tcp",
            "ENABLE_TAILSCALE": "false",
            "DB_PORT": "5432",
            "DB_SSL": "false",
            # The startup script fails without it.
            "RLIMIT_NOFILE": "10000",
        }
    )
    READINESS = LogMatch("Realtime has started", stream="stdout")

    def with_postgres_connection(self, connection_string: str) -> "Realtime":
        return self.with_env("DB_URL", connection_string)

    def with_db_host(self, host: str) -> "Realtime":
        return self.with_env("DB_HOST", host)

    def with_db_port(self, port: int) -> "Realtime":
        return self.with_env("DB_PORT", port)

    def with_db_name(self, name: str) -> "Realtime":
        return self.with_env("DB_NAME", name)

    def with_db_user(self, user: str) -> "Realtime":
        return self.with_env("DB_USER", user)

    def with_db_password(self, password: str) -> "Realtime":
        return self.with_env("DB_PASSWORD", password)

    def with_db_ssl(self, enabled: bool) -> "Realtime":
        return self.with_env("DB_SSL", enabled)

    def with_db_after_connect_query(self, query: str) -> "Realtime":
        return self.with_env("DB_AFTER_CONNECT_QUERY", query)

    def with_jwt_secret(self, secret: str) -> "Realtime":
        return self.with_env("JWT_SECRET", secret)

    def with_api_jwt_secret(self, secret: str) -> "Realtime":
        return self.with_env("API_JWT_SECRET", secret)

    def with_secret_key_base(self, secret: str) -> "Realtime":
        """The Phoenix secret key base, at least 64 characters."""
        return self.with_env("SECRET_KEY_BASE", secret)

    def with_slot_name(self, name: str) -> "Realtime":
        return self.with_env("SLOT_NAME", name)

    def with_temporary_slot(self, temporary: bool) -> "Realtime":
        return self.with_env("TEMPORARY_SLOT", temporary)

    def with_max_record_bytes(self, max_bytes: int) -> "Realtime":
        return self.with_env("MAX_RECORD_BYTES", max_bytes)

    def with_secure_channels(self, secure: bool) -> "Realtime":
        return self.with_env("SECURE_CHANNELS", secure)

    def with_region(self, region: str) -> "Realtime":
        return self.with_env("REGION", region)

    def with_tenant_id(self, tenant_id: str) -> "Realtime":
        return self.with_env("TENANT_ID", tenant_id)

    def with_erl_aflags(self, flags: str) -> "Realtime":
        return self.with_env("ERL_AFLAGS", flags)

    def with_dns_nodes(self, nodes: str) -> "Realtime":
        return self.with_env("DNS_NODES", nodes)

    def with_enable_tailscale(self, enabled: bool) -> "Realtime":
        return self.with_env("ENABLE_TAILSCALE", enabled)

    def with_port(self, port: int) -> "Realtime":
        return self.with_env("PORT", port)
