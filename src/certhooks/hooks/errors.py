"""Error taxonomy for hook invocation.

Every fatal condition raised while running a hook derives from
:class:`HookError`, so callers of :func:`~certhooks.hooks.dispatch`
need a single ``except`` clause.  An *allowed failure* (non-zero exit
with ``allow_failure`` set) is not an error and never raises.
"""

from __future__ import annotations


class HookError(Exception):
    """Base class for fatal hook failures.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.
    hook_name:
        Name of the hook being invoked, when known.

    """

    def __init__(self, detail: str, *, hook_name: str | None = None) -> None:
        self.detail = detail
        self.hook_name = hook_name
        if hook_name:
            detail = f"Hook {hook_name}: {detail}"
        super().__init__(detail)


class TemplateError(HookError):
    """A template is malformed or references an unknown field.

    Always fatal: a broken template is a configuration problem, so
    ``allow_failure`` never suppresses it.
    """

    def __init__(
        self,
        template: str,
        reason: str,
        *,
        hook_name: str | None = None,
    ) -> None:
        self.template = template
        self.reason = reason
        super().__init__(
            f"cannot render template {template!r}: {reason}",
            hook_name=hook_name,
        )


class HookIoError(HookError):
    """Creating a redirect file or writing the child's stdin failed."""


class SpawnError(HookIoError):
    """The hook command could not be started."""


class HookExecutionError(HookError):
    """The child exited unsuccessfully and ``allow_failure`` is false.

    Attributes
    ----------
    exit_code:
        The process exit code, or ``None`` when it was killed by a signal.
    signal:
        The terminating signal number, when there is one.

    """

    def __init__(
        self,
        hook_name: str,
        *,
        exit_code: int | None = None,
        signal: int | None = None,
    ) -> None:
        self.exit_code = exit_code
        self.signal = signal
        if exit_code is not None:
            detail = f"unrecoverable failure: code {exit_code}"
        elif signal is not None:
            detail = f"unrecoverable failure: terminated by signal {signal}"
        else:
            detail = "unrecoverable failure"
        super().__init__(detail, hook_name=hook_name)
