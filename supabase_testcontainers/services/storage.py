# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

from types import MappingProxyType

from supabase_testcontainers.consts import STORAGE_PORT
from supabase_testcontainers.service import LogMatch, Service

DEFAULT_FILE_SIZE_LIMIT = 50 * 1024 * 1024


class Storage(Service):
    """Supabase Storage, defaulting to the local file backend."""

    SERVICE = "storage"
    DEFAULTS = MappingProxyType(
        {
            "PORT": str(STORAGE_PORT),
            "REGION": "local",
            "STORAGE_BACKEND": "file",
            "FILE_STORAGE_BACKEND_PATH": "/var/lib/storage",
            "FILE_SIZE_LIMIT": str(DEFAULT_FILE_SIZE_LIMIT),
            "GLOBAL_S3_BUCKET": "storage",
            "TENANT_ID": "default",
            "IS_MULTITENANT": "false",
        }
    )
    # Logged as JSON: {"msg":"[Server] Started Successfully",...}
    READINESS = LogMatch("[Server] Started Successfully", stream="stdout")

    def with_database_url(self, url: str) -> "Storage":
        return self.with_env("DATABASE_URL", url)

    def with_storage_backend(self, backend: str) -> "Storage":
        """Either "file" or "s3"."""
        return self.with_env("STORAGE_BACKEND", backend)

    def with_anon_key(self, key: str) -> "Storage":
        return self.with_env("ANON_KEY", key)

    def with_service_key(self, key: str) -> "Storage":
        """A service role JWT, which bypasses row level security."""
        return self.with_env("SERVICE_KEY", key)

    def with_jwt_secret(self, secret: str) -> "Storage":
        return self.with_env("PGRST_JWT_SECRET", secret)

    def with_postgrest_url(self, url: str) -> "Storage":
        return self.with_env("POSTGREST_URL", url)

    def with_tenant_id(self, tenant_id: str) -> "Storage":
        return self.with_env("TENANT_ID", tenant_id)

    def with_region(self, region: str) -> "Storage":
        return self.with_env("REGION", region)

    def with_global_s3_bucket(self, bucket: str) -> "Storage":
        return self.with_env("GLOBAL_S3_BUCKET", bucket)

    def with_file_size_limit(self, limit: int) -> "Storage":
        """The maximum upload size, in bytes."""
        return self.with_env("FILE_SIZE_LIMIT", limit)

    def with_file_storage_path(self, path: str) -> "Storage":
        return self.with_env("FILE_STORAGE_BACKEND_PATH", path)

    def with_upload_signed_url_expiration(self, seconds: int) -> "Storage":
        return self.with_env("UPLOAD_SIGNED_URL_EXPIRATION_TIME", seconds)

    def with_multitenant(self, enabled: bool) -> "Storage":
        return self.with_env("IS_MULTITENANT", enabled)

    def with_tus_url_path(self, path: str) -> "Storage":
        return self.with_env("TUS_URL_PATH", path)
