# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Fixed images, tags and ports of the supported services."""

from dataclasses import dataclass
from types import MappingProxyType

# Hostname that resolves to the host machine from inside a container.
DOCKER_INTERNAL_HOST = "host.docker.internal"
# Hostname that reaches a published container port from the host machine.
LOCAL_HOST = "localhost"

AUTH_PORT = 9999
POSTGREST_PORT = 3000
STORAGE_PORT = 5000
REALTIME_PORT = 4000
FUNCTIONS_PORT = 9000
GRAPHQL_PORT = 5432
ANALYTICS_PORT = 4000
POSTGRES_PORT = 5432


@dataclass(frozen=True)
class ImageDefaults:
    repository: str
    tag: str
    port: int


IMAGES = MappingProxyType(
    {
        "auth": ImageDefaults("supabase/gotrue", "v2.183.0", AUTH_PORT),
        "postgrest": ImageDefaults("postgrest/postgrest", "v12.2.3", POSTGREST_PORT),
        "storage": ImageDefaults("supabase/storage-api", "v1.11.1", STORAGE_PORT),
        "realtime": ImageDefaults("supabase/realtime", "v2.33.58", REALTIME_PORT),
        "functions": ImageDefaults(
            "supabase/edge-runtime", "v1.67.4", FUNCTIONS_PORT
        ),
        "graphql": ImageDefaults("supabase/postgres", "15.8.1.085", GRAPHQL_PORT),
        "analytics": ImageDefaults("supabase/logflare", "1.26.13", ANALYTICS_PORT),
        "postgres": ImageDefaults("postgres", "15-alpine", POSTGRES_PORT),
    }
)
