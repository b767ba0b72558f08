# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Prepare a database role and schema before a dependent service starts.

Services like Auth run their own migrations as a restricted role that has to
exist beforehand. `init_schema` creates that role and its schema with an
administrative connection that is never handed to the service itself.

This must complete before the dependent container is started; nothing
enforces that ordering at runtime.
"""

import logging
from dataclasses import dataclass

import psycopg
from psycopg import sql

from supabase_testcontainers import ui
from supabase_testcontainers.config import Settings
from supabase_testcontainers.errors import SchemaInitFailed

LOGGER = logging.getLogger(__name__)

DEFAULT_SCHEMA = "auth"
SUPABASE_ADMIN_ROLE = "supabase_admin"

say = ui.speaker("schema> ")


@dataclass(frozen=True)
class SchemaInitParams:
    admin_connection_string: str
    target_role_name: str
    target_role_password: str
    schema_name: str | None = None

    @property
    def schema(self) -> str:
        return self.schema_name or DEFAULT_SCHEMA

    def __repr__(self) -> str:
        return (
            f"SchemaInitParams(target_role_name={self.target_role_name!r}, "
            f"schema_name={self.schema!r})"
        )


def _create_role_if_absent(role: str, options: str) -> sql.Composed:
    return sql.SQL(
        "DO $$ BEGIN "
        "IF NOT EXISTS (SELECT FROM pg_catalog.pg_roles WHERE rolname = {name}) "
        "THEN CREATE ROLE {role} " + options + "; "
        "END IF; END $$"
    ).format(name=sql.Literal(role), role=sql.Identifier(role))


def schema_statements(
    params: SchemaInitParams, database: str
) -> list[tuple[str, sql.Composed]]:
    """The statements `init_schema` runs, in order, each named by its step.

    Every statement is safe to rerun: objects are only created if absent and
    the password is always reapplied.
    """
    role = sql.Identifier(params.target_role_name)
    schema = sql.Identifier(params.schema)
    return [
        (
            f"create role {SUPABASE_ADMIN_ROLE}",
            _create_role_if_absent(
                SUPABASE_ADMIN_ROLE, "LOGIN CREATEROLE CREATEDB REPLICATION BYPASSRLS"
            ),
        ),
        (
            f"create role {params.target_role_name}",
            _create_role_if_absent(
                params.target_role_name, "NOINHERIT CREATEROLE LOGIN NOREPLICATION"
            ),
        ),
        (
            f"create schema {params.schema}",
            sql.SQL("CREATE SCHEMA IF NOT EXISTS {schema} AUTHORIZATION {role}").format(
                schema=schema, role=role
            ),
        ),
        (
            "grant create on database",
            sql.SQL("GRANT CREATE ON DATABASE {database} TO {role}").format(
                database=sql.Identifier(database), role=role
            ),
        ),
        (
            "grant on schema",
            sql.SQL("GRANT ALL ON SCHEMA {schema} TO {role}").format(
                schema=schema, role=role
            ),
        ),
        (
            "set password",
            sql.SQL("ALTER ROLE {role} WITH PASSWORD {password}").format(
                role=role, password=sql.Literal(params.target_role_password)
            ),
        ),
        (
            "set search_path",
            sql.SQL("ALTER ROLE {role} SET search_path = {schema}").format(
                role=role, schema=schema
            ),
        ),
    ]


def init_schema(params: SchemaInitParams, timeout: float | None = None) -> None:
    """Create the target role and schema, granting the role what it needs.

    Running this twice with the same parameters leaves the database in the
    same state and does not fail.

    Args:
        params: What to create and the administrative connection to use.
        timeout: Bound, in seconds, on connecting and on each statement.
            Defaults to `SUPABASE_TC_CONNECT_TIMEOUT`.

    Raises:
        SchemaInitFailed: On connection, authentication or statement
            failure. Nothing is retried.
    """
    if not params.admin_connection_string:
        raise SchemaInitFailed("connect", "database URL cannot be empty")
    if timeout is None:
        timeout = Settings.from_env().connect_timeout

    say(f"initializing schema {params.schema!r} for role {params.target_role_name!r}")
    try:
        conn = psycopg.connect(
            params.admin_connection_string,
            autocommit=True,
            # libpq treats values below 2 as 2.
            connect_timeout=max(2, int(timeout)),
            # A statement_timeout of 0 disables the timeout.
            options=f"-c statement_timeout={max(1, int(timeout * 1000))}",
        )
    except psycopg.Error as e:
        raise SchemaInitFailed("connect", str(e).strip()) from e

    with conn:
        with conn.cursor() as cursor:
            try:
                cursor.execute("SELECT current_database()")
                row = cursor.fetchone()
            except psycopg.Error as e:
                raise SchemaInitFailed("resolve database", str(e).strip()) from e
            assert row is not None
            database = row[0]

            for step, statement in schema_statements(params, database):
                LOGGER.info("schema initialization: %s", step)
                try:
                    cursor.execute(statement)
                except psycopg.Error as e:
                    raise SchemaInitFailed(step, str(e).strip()) from e

    say("schema initialized")
