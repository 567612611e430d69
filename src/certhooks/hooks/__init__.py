"""Hook execution subsystem for certhooks.

Public API::

    from certhooks.hooks import ChallengeContext, HookEvent, dispatch

    ctx = ChallengeContext(
        domain="example.com",
        challenge="http-01",
        file_name=token,
        proof=key_authorization,
    )
    dispatch(certificate, ctx, HookEvent.CHALLENGE_HTTP_01)
"""

from certhooks.hooks.context import (
    AnyContext,
    ChallengeContext,
    FileStorageContext,
    HookContext,
    PostOperationContext,
)
from certhooks.hooks.dispatcher import dispatch
from certhooks.hooks.errors import (
    HookError,
    HookExecutionError,
    HookIoError,
    SpawnError,
    TemplateError,
)
from certhooks.hooks.events import KNOWN_EVENTS, HookEvent, challenge_event
from certhooks.hooks.invoker import HookOutcome, HookResult, invoke

__all__ = [
    "KNOWN_EVENTS",
    "AnyContext",
    "ChallengeContext",
    "FileStorageContext",
    "HookContext",
    "HookError",
    "HookEvent",
    "HookExecutionError",
    "HookIoError",
    "HookOutcome",
    "HookResult",
    "PostOperationContext",
    "SpawnError",
    "TemplateError",
    "challenge_event",
    "dispatch",
    "invoke",
]
