"""Hook-specific fixtures and builders for testing."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from certhooks.config.settings import HookDefinition
from certhooks.hooks.context import (
    ChallengeContext,
    FileStorageContext,
    PostOperationContext,
)
from certhooks.hooks.events import HookEvent
from certhooks.models.certificate import Certificate

SH = "/bin/sh"

# ---------------------------------------------------------------------------
# Helper builders
# ---------------------------------------------------------------------------


def make_hook(
    name: str = "test-hook",
    events: tuple[HookEvent, ...] = (HookEvent.CHALLENGE_HTTP_01,),
    cmd: str = SH,
    args: tuple[str, ...] | None = None,
    stdin: str | None = None,
    stdout: str | None = None,
    stderr: str | None = None,
    allow_failure: bool = False,
) -> HookDefinition:
    return HookDefinition(
        name=name,
        events=events,
        cmd=cmd,
        args=args,
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
        allow_failure=allow_failure,
    )


def shell_hook(script: str, **kwargs) -> HookDefinition:
    """A hook running ``/bin/sh -c <script>``."""
    return make_hook(cmd=SH, args=("-c", script), **kwargs)


def make_certificate(*hooks: HookDefinition, name: str = "www") -> Certificate:
    return Certificate(name=name, hooks=tuple(hooks))


def write_script(directory: Path, name: str, body: str) -> Path:
    """Write an executable ``/bin/sh`` script and return its path."""
    path = directory / name
    path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


# ---------------------------------------------------------------------------
# Context fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def challenge_ctx() -> ChallengeContext:
    return ChallengeContext(
        domain="example.com",
        challenge="http-01",
        file_name="token123",
        proof="abc123",
    )


@pytest.fixture()
def post_operation_ctx() -> PostOperationContext:
    return PostOperationContext(
        domains=("example.com", "www.example.com"),
        algorithm="ecdsa_p256",
        status="Renewed",
        is_success=True,
    )


@pytest.fixture()
def file_storage_ctx() -> FileStorageContext:
    return FileStorageContext.from_path("/etc/certs/www.crt.pem")
