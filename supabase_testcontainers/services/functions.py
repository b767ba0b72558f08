# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

from types import MappingProxyType

from supabase_testcontainers.consts import FUNCTIONS_PORT
from supabase_testcontainers.service import LogMatch, Service

DEFAULT_MAIN_SERVICE_PATH = "/home/deno/functions"


class Functions(Service):
    """The Supabase edge runtime, serving Deno functions.

    Functions are read from the main service path, which callers typically
    bind-mount into the container.
    """

    SERVICE = "functions"
    DEFAULTS = MappingProxyType(
        {
            "PORT": str(FUNCTIONS_PORT),
            "VERIFY_JWT": "true",
        }
    )
    READINESS = LogMatch("Listening on", stream="stdout")

    main_service_path = DEFAULT_MAIN_SERVICE_PATH

    def with_jwt_secret(self, secret: str) -> "Functions":
        return self.with_env("JWT_SECRET", secret)

    def with_supabase_url(self, url: str) -> "Functions":
        return self.with_env("SUPABASE_URL", url)

    def with_anon_key(self, key: str) -> "Functions":
        return self.with_env("SUPABASE_ANON_KEY", key)

    def with_service_role_key(self, key: str) -> "Functions":
        return self.with_env("SUPABASE_SERVICE_ROLE_KEY", key)

    def with_db_url(self, url: str) -> "Functions":
        return self.with_env("SUPABASE_DB_URL", url)

    def with_verify_jwt(self, verify: bool) -> "Functions":
        return self.with_env("VERIFY_JWT", verify)

    def with_main_service_path(self, path: str) -> "Functions":
        clone = self._replace()
        clone.main_service_path = path
        return clone

    def with_port(self, port: int) -> "Functions":
        return self.with_env("PORT", port)

    def with_worker_timeout_ms(self, timeout: int) -> "Functions":
        return self.with_env("WORKER_TIMEOUT_MS", timeout)

    def with_max_parallelism(self, max_parallelism: int) -> "Functions":
        return self.with_env("MAX_PARALLELISM", max_parallelism)

    def command(self) -> tuple[str, ...]:
        explicit = super().command()
        if explicit is not None:
            return explicit
        return ("start", "--main-service", self.main_service_path)
