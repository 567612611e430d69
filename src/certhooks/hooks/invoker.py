"""Run a single hook as a child process.

:func:`invoke` renders the hook's templates against the event context,
binds the child's standard streams, spawns it with the merged
environment and blocks until it exits.  There is no timeout: a hook
that never exits blocks its dispatch forever.

Stream bindings:

- ``stdout`` / ``stderr`` templates name files that are created or
  truncated; without a template the stream goes to the null device.
- a ``stdin`` template is rendered *after* the child has started and
  written to a pipe; without one the child reads from the null device.
"""

from __future__ import annotations

import contextlib
import logging
import subprocess
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import IO, TYPE_CHECKING

from certhooks.hooks.errors import (
    HookExecutionError,
    HookIoError,
    SpawnError,
    TemplateError,
)
from certhooks.hooks.template import render_template
from certhooks.logging.sanitize import sanitize_for_logs

if TYPE_CHECKING:
    from certhooks.config.settings import HookDefinition
    from certhooks.hooks.context import HookContext

log = logging.getLogger(__name__)


class HookOutcome(StrEnum):
    SUCCESS = "success"
    ALLOWED_FAILURE = "allowed_failure"


@dataclass(frozen=True)
class HookResult:
    """Outcome of one non-fatal hook invocation."""

    hook_name: str
    outcome: HookOutcome
    returncode: int
    duration_ms: float

    @property
    def success(self) -> bool:
        return self.outcome is HookOutcome.SUCCESS


def _open_output(
    template: str | None,
    context: HookContext,
    hook: HookDefinition,
    stack: contextlib.ExitStack,
) -> IO[bytes] | int:
    """Return the file object (or ``DEVNULL``) for a redirected stream."""
    if template is None:
        return subprocess.DEVNULL
    path = render_template(template, context, hook_name=hook.name)
    try:
        return stack.enter_context(open(path, "wb"))  # noqa: SIM115
    except (OSError, ValueError) as exc:
        msg = f"cannot open output file {path!r}: {getattr(exc, 'strerror', None) or exc}"
        raise HookIoError(msg, hook_name=hook.name) from exc


def _feed_stdin(
    proc: subprocess.Popen,
    context: HookContext,
    hook: HookDefinition,
) -> None:
    """Render the stdin template and write it to the running child.

    On any failure the pipe is closed so the child sees end-of-input,
    the child is reaped, and the error is re-raised.
    """
    assert proc.stdin is not None  # noqa: S101
    assert hook.stdin is not None  # noqa: S101
    try:
        try:
            data = render_template(hook.stdin, context, hook_name=hook.name)
        except TemplateError:
            log.error(
                "Hook %s: stdin template failed after spawn, "
                "letting pid %d finish with empty input",
                hook.name,
                proc.pid,
            )
            raise
        log.debug("Hook %s: stdin: %s", hook.name, sanitize_for_logs(data))
        try:
            proc.stdin.write(data.encode("utf-8"))
            proc.stdin.close()
        except OSError as exc:
            msg = f"cannot write to stdin: {exc.strerror or exc}"
            raise HookIoError(msg, hook_name=hook.name) from exc
    except BaseException:
        with contextlib.suppress(OSError):
            proc.stdin.close()
        proc.wait()
        raise


def _classify(
    hook: HookDefinition,
    returncode: int,
    duration_ms: float,
) -> HookResult:
    if returncode == 0:
        log.debug("Hook %s: exited: code 0", hook.name)
        return HookResult(hook.name, HookOutcome.SUCCESS, returncode, duration_ms)

    exit_code = returncode if returncode > 0 else None
    signal = -returncode if returncode < 0 else None

    if hook.allow_failure:
        if exit_code is not None:
            log.warning("Hook %s: allowed failure: code %d", hook.name, exit_code)
        else:
            log.warning(
                "Hook %s: allowed failure: terminated by signal %d",
                hook.name,
                signal,
            )
        return HookResult(hook.name, HookOutcome.ALLOWED_FAILURE, returncode, duration_ms)

    raise HookExecutionError(hook.name, exit_code=exit_code, signal=signal)


def invoke(context: HookContext, hook: HookDefinition) -> HookResult:
    """Run *hook* once for *context* and classify its exit status.

    Returns
    -------
    HookResult
        For a successful exit, or an unsuccessful one with
        ``allow_failure`` set.

    Raises
    ------
    TemplateError
        A template could not be rendered.
    HookIoError
        A redirect file could not be opened or stdin could not be written.
    SpawnError
        The command could not be started.
    HookExecutionError
        The command failed and ``allow_failure`` is false.

    """
    log.debug("Calling hook: %s", hook.name)

    cmd = render_template(hook.cmd, context, hook_name=hook.name)
    args = [render_template(a, context, hook_name=hook.name) for a in hook.args or ()]
    log.debug("Hook %s: cmd: %s", hook.name, cmd)
    log.debug("Hook %s: args: %s", hook.name, args)

    with contextlib.ExitStack() as stack:
        stdout = _open_output(hook.stdout, context, hook, stack)
        stderr = _open_output(hook.stderr, context, hook, stack)
        stdin = subprocess.PIPE if hook.stdin is not None else subprocess.DEVNULL

        start = time.monotonic()
        try:
            proc = subprocess.Popen(  # noqa: S603
                [cmd, *args],
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                env=dict(context.environment()),
            )
        except (OSError, ValueError) as exc:
            msg = f"cannot run {cmd!r}: {getattr(exc, 'strerror', None) or exc}"
            raise SpawnError(msg, hook_name=hook.name) from exc

    # The child holds its own copies of the redirect descriptors now.
    if hook.stdin is not None:
        _feed_stdin(proc, context, hook)

    returncode = proc.wait()
    duration_ms = round((time.monotonic() - start) * 1000, 2)
    return _classify(hook, returncode, duration_ms)
