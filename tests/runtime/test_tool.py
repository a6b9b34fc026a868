"""Unit tests for the firebase CLI wrapper (no executable spawned)."""

from __future__ import annotations

import pytest

from firebase_env.runtime.errors import ToolError
from firebase_env.runtime.tool import FirebaseTool, ToolResult, config_keys
from tests.utils import failed, ok


def test_command_appends_project() -> None:
    assert FirebaseTool().command("login:list") == ["firebase", "login:list"]
    assert FirebaseTool("fb", project="demo").command("functions:config:get") == [
        "fb",
        "functions:config:get",
        "--project",
        "demo",
    ]


def test_result_flags() -> None:
    assert ok().ok
    assert not failed().ok
    assert failed("Error: Authentication Error: Your credentials are no longer valid.").is_auth_error
    assert not failed("Error: quota exceeded").is_auth_error
    assert ok("out").output == "out"


def test_config_keys() -> None:
    assert config_keys(ok('{"stripe": {"key": "x"}, "api": {}}')) == ["stripe", "api"]
    assert config_keys(ok("{}")) == []


def test_config_keys_rejects_non_object() -> None:
    with pytest.raises(TypeError):
        config_keys(ok("[]"))
    with pytest.raises(ValueError):
        config_keys(ok("not json"))


async def test_run_spawn_failure_raises_tool_error(monkeypatch: pytest.MonkeyPatch) -> None:
    async def missing(*args, **kwargs):
        raise FileNotFoundError("firebase")

    monkeypatch.setattr("firebase_env.runtime.tool.anyio.run_process", missing)

    with pytest.raises(ToolError, match="Could not run firebase"):
        await FirebaseTool().login_list()


async def test_run_decodes_output(monkeypatch: pytest.MonkeyPatch) -> None:
    class Completed:
        returncode = 0
        stdout = b'{"a": 1}'
        stderr = b""

    seen: list[list[str]] = []

    async def fake_run_process(cmd, check=True):
        seen.append(cmd)
        return Completed()

    monkeypatch.setattr("firebase_env.runtime.tool.anyio.run_process", fake_run_process)

    result = await FirebaseTool(project="demo").config_set("API_KEY", "a=b")

    assert seen == [["firebase", "functions:config:set", "API_KEY=a=b", "--project", "demo"]]
    assert result == ToolResult(args=("functions:config:set", "API_KEY=a=b"), returncode=0, stdout='{"a": 1}')
