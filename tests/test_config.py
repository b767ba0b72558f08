# Copyright Materialize, Inc. and contributors. All rights reserved.
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file at the root of this repository.
#
# As of the Change Date specified in that file, in accordance with
# the Business Source License, use of this software will be governed
# by the Apache License, Version 2.0.

import pytest

from supabase_testcontainers import ui
from supabase_testcontainers.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "SUPABASE_TC_READY_TIMEOUT",
        "SUPABASE_TC_CONNECT_TIMEOUT",
        "SUPABASE_TC_DOCKER_HOST_GATEWAY",
    ):
        monkeypatch.delenv(var, raising=False)
    assert Settings.from_env() == Settings(
        ready_timeout=60.0, connect_timeout=30.0, host_gateway=True
    )


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_TC_READY_TIMEOUT", "120")
    monkeypatch.setenv("SUPABASE_TC_CONNECT_TIMEOUT", "2.5")
    monkeypatch.setenv("SUPABASE_TC_DOCKER_HOST_GATEWAY", "no")
    settings = Settings.from_env()
    assert settings.ready_timeout == 120.0
    assert settings.connect_timeout == 2.5
    assert not settings.host_gateway


def test_empty_value_uses_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_TC_READY_TIMEOUT", "")
    assert Settings.from_env().ready_timeout == 60.0


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_invalid_timeout(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("SUPABASE_TC_READY_TIMEOUT", value)
    with pytest.raises(ui.UIError) as exc:
        Settings.from_env()
    assert "SUPABASE_TC_READY_TIMEOUT" in str(exc.value)


@pytest.mark.parametrize(
    "value,expected", [("1", True), ("yes", True), ("", False), ("0", False)]
)
def test_env_is_truthy(
    monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
) -> None:
    monkeypatch.setenv("SUPABASE_TC_QUIET", value)
    assert ui.env_is_truthy("SUPABASE_TC_QUIET") is expected


def test_verbosity_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_TC_QUIET", "1")
    ui.Verbosity.init_from_env(explicit=None)
    assert ui.Verbosity.quiet
    ui.Verbosity.init_from_env(explicit=False)
    assert not ui.Verbosity.quiet


def test_speaker_obeys_quiet(capsys: pytest.CaptureFixture[str]) -> None:
    say = ui.speaker("tc> ")
    say("hidden")
    ui.Verbosity.quiet = False
    say("shown")
    assert capsys.readouterr().err == "tc> shown\n"


def test_timeout_loop_iterates_at_least_once() -> None:
    assert len(list(ui.timeout_loop(0, tick=0))) == 1


def test_error_handler(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        with ui.error_handler("prog"):
            raise ui.UIError("boom", hint="try again")
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "boom" in err
    assert "try again" in err
