# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

"""Inspect service descriptors from the command line.

    $ python -m supabase_testcontainers compose auth postgres
    $ python -m supabase_testcontainers images
"""

import argparse
import sys
from collections.abc import Sequence

from supabase_testcontainers import ui
from supabase_testcontainers.consts import IMAGES
from supabase_testcontainers.service import Service, render_compose
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

BUILDERS: dict[str, type[Service]] = {
    builder.SERVICE: builder
    for builder in (
        Analytics,
        Auth,
        Functions,
        GraphQL,
        Postgres,
        PostgREST,
        Realtime,
        Storage,
    )
}


def builder_for(service: str) -> Service:
    try:
        return BUILDERS[service]()
    except KeyError:
        raise ui.UIError(
            f"unknown service {service!r}",
            hint="known services: " + ", ".join(sorted(BUILDERS)),
        )


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="supabase-testcontainers",
        description="Inspect the containers this package launches",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compose = subparsers.add_parser(
        "compose", help="print a docker-compose.yml for the named services"
    )
    compose.add_argument("services", nargs="+", metavar="SERVICE")
    compose.add_argument(
        "--tag",
        action="append",
        default=[],
        metavar="SERVICE=TAG",
        help="override the image tag of a service",
    )

    subparsers.add_parser("images", help="list the default image of each service")

    args = parser.parse_args(argv)

    with ui.error_handler("supabase-testcontainers"):
        if args.command == "images":
            for name, defaults in sorted(IMAGES.items()):
                print(f"{name:<10} {defaults.repository}:{defaults.tag}")
            return

        tags = {}
        for override in args.tag:
            service, sep, tag = override.partition("=")
            if not sep or not tag:
                raise ui.UIError(f"malformed --tag {override!r}, expected SERVICE=TAG")
            tags[service] = tag

        # Services are keyed by name in the compose file.
        repeated = sorted({s for s in args.services if args.services.count(s) > 1})
        if repeated:
            raise ui.UIError(
                "service given more than once: " + ", ".join(repeated)
            )

        descriptors = []
        for service in args.services:
            builder = builder_for(service)
            if service in tags:
                builder = builder.with_tag(tags[service])
            descriptors.append(builder.descriptor())
        for service in sorted(set(tags) - set(args.services)):
            ui.warn(f"--tag given for {service!r}, which is not being rendered")
        sys.stdout.write(render_compose(descriptors))


if __name__ == "__main__":
    main()
