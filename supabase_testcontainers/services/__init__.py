# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

from supabase_testcontainers.services.analytics import Analytics
from supabase_testcontainers.services.auth import Auth
from supabase_testcontainers.services.functions import Functions
from supabase_testcontainers.services.graphql import GraphQL
from supabase_testcontainers.services.postgres import Postgres
from supabase_testcontainers.services.postgrest import PostgREST
from supabase_testcontainers.services.realtime import Realtime
from supabase_testcontainers.services.storage import Storage
