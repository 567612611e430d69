"""Select and run the hooks a certificate registered for an event.

Hooks run one at a time, in configuration order, each receiving the
same context.  The first fatal failure stops the sequence: hooks listed
after it do not run, and nothing already done is rolled back.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from certhooks.hooks.events import EVENT_CONTEXT_MAP, HookEvent, parse_event
from certhooks.hooks.invoker import HookResult, invoke

if TYPE_CHECKING:
    from collections.abc import Callable

    from certhooks.config.settings import HookDefinition
    from certhooks.hooks.context import HookContext
    from certhooks.models.certificate import Certificate

log = logging.getLogger(__name__)


def dispatch(
    certificate: Certificate,
    context: HookContext,
    event: HookEvent | str,
    *,
    invoker: Callable[[HookContext, HookDefinition], HookResult] = invoke,
) -> list[HookResult]:
    """Run every hook of *certificate* registered for *event*.

    Parameters
    ----------
    certificate:
        Supplies the ordered hook list.
    context:
        Event payload, shared read-only by every hook.
    event:
        The lifecycle event, as a :class:`HookEvent` or its name.
    invoker:
        Runs a single hook; replaceable for testing.

    Returns
    -------
    list[HookResult]
        One entry per hook run, all successes or allowed failures.

    Raises
    ------
    ValueError
        *event* is not a known event name.
    TypeError
        *context* is not the payload type *event* carries.
    HookError
        Propagated unchanged from the first hook that failed fatally.

    """
    hook_event = parse_event(event)
    expected = EVENT_CONTEXT_MAP[hook_event]
    kind = getattr(context, "kind", None)
    if kind != expected:
        msg = (
            f"Event '{hook_event}' expects a {expected} context, "
            f"got {type(context).__name__}"
        )
        raise TypeError(msg)

    selected = certificate.hooks_for(hook_event)
    if not selected:
        log.debug(
            "No hooks registered for '%s' on certificate %s",
            hook_event,
            certificate.name,
            extra={"event": str(hook_event)},
        )
        return []

    log.info(
        "Running %d hook(s) for '%s' on certificate %s",
        len(selected),
        hook_event,
        certificate.name,
        extra={"event": str(hook_event)},
    )

    results: list[HookResult] = []
    for hook in selected:
        try:
            result = invoker(context, hook)
        except Exception:
            log.error(
                "Hook %s failed for '%s', skipping %d remaining hook(s)",
                hook.name,
                hook_event,
                len(selected) - len(results) - 1,
                extra={"hook_name": hook.name, "event": str(hook_event)},
            )
            raise
        log.debug(
            "Hook %s finished for '%s' in %.1fms (%s)",
            hook.name,
            hook_event,
            result.duration_ms,
            result.outcome,
            extra={
                "hook_name": hook.name,
                "event": str(hook_event),
                "outcome": str(result.outcome),
                "duration_ms": result.duration_ms,
            },
        )
        results.append(result)
    return results
