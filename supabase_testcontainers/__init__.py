# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Package `supabase_testcontainers` launches Supabase's backend services in
Docker for integration tests.

Each service has a builder in `supabase_testcontainers.services` that
produces a `ServiceDescriptor`: an image, an environment, exposed ports, a
readiness condition and an optional command. Hand a builder to
`orchestrator.launch` to run it, or use `lifecycle.AuthStack` to bring up
Auth together with the Postgres database it needs.
"""

from supabase_testcontainers import ui
from supabase_testcontainers.consts import (
    ANALYTICS_PORT,
    AUTH_PORT,
    DOCKER_INTERNAL_HOST,
    FUNCTIONS_PORT,
    GRAPHQL_PORT,
    LOCAL_HOST,
    POSTGRES_PORT,
    POSTGREST_PORT,
    REALTIME_PORT,
    STORAGE_PORT,
)
from supabase_testcontainers.errors import (
    LaunchFailed,
    NotReady,
    PortNotExposed,
    SchemaInitFailed,
    StackFailed,
)
from supabase_testcontainers.schema import SchemaInitParams, init_schema
from supabase_testcontainers.service import (
    HttpProbe,
    LogMatch,
    ServiceDescriptor,
    render_compose,
)
from supabase_testcontainers.services import (
    Analytics,
    Auth,
    Functions,
    GraphQL,
    Postgres,
    PostgREST,
    Realtime,
    Storage,
)

ui.Verbosity.init_from_env(explicit=None)
