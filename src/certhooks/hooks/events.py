"""Canonical hook event definitions.

Single source of truth for all lifecycle event names a hook can be
registered for, and for the context family each event carries.

This module has **zero** internal dependencies, so it can be imported
from anywhere without circular import risk.
"""

from __future__ import annotations

from enum import StrEnum


class HookEvent(StrEnum):
    POST_OPERATION = "post-operation"
    CHALLENGE_HTTP_01 = "challenge-http-01"
    CHALLENGE_HTTP_01_CLEAN = "challenge-http-01-clean"
    CHALLENGE_DNS_01 = "challenge-dns-01"
    CHALLENGE_DNS_01_CLEAN = "challenge-dns-01-clean"
    CHALLENGE_TLS_ALPN_01 = "challenge-tls-alpn-01"
    CHALLENGE_TLS_ALPN_01_CLEAN = "challenge-tls-alpn-01-clean"
    FILE_PRE_CREATE = "file-pre-create"
    FILE_POST_CREATE = "file-post-create"
    FILE_PRE_EDIT = "file-pre-edit"
    FILE_POST_EDIT = "file-post-edit"


class ContextKind(StrEnum):
    """Family of context payload an event carries."""

    POST_OPERATION = "post_operation"
    CHALLENGE = "challenge"
    FILE_STORAGE = "file_storage"


EVENT_CONTEXT_MAP: dict[HookEvent, ContextKind] = {
    HookEvent.POST_OPERATION: ContextKind.POST_OPERATION,
    HookEvent.CHALLENGE_HTTP_01: ContextKind.CHALLENGE,
    HookEvent.CHALLENGE_HTTP_01_CLEAN: ContextKind.CHALLENGE,
    HookEvent.CHALLENGE_DNS_01: ContextKind.CHALLENGE,
    HookEvent.CHALLENGE_DNS_01_CLEAN: ContextKind.CHALLENGE,
    HookEvent.CHALLENGE_TLS_ALPN_01: ContextKind.CHALLENGE,
    HookEvent.CHALLENGE_TLS_ALPN_01_CLEAN: ContextKind.CHALLENGE,
    HookEvent.FILE_PRE_CREATE: ContextKind.FILE_STORAGE,
    HookEvent.FILE_POST_CREATE: ContextKind.FILE_STORAGE,
    HookEvent.FILE_PRE_EDIT: ContextKind.FILE_STORAGE,
    HookEvent.FILE_POST_EDIT: ContextKind.FILE_STORAGE,
}

KNOWN_EVENTS: frozenset[str] = frozenset(e.value for e in HookEvent)

_CHALLENGE_EVENTS: dict[tuple[str, bool], HookEvent] = {
    ("http-01", False): HookEvent.CHALLENGE_HTTP_01,
    ("http-01", True): HookEvent.CHALLENGE_HTTP_01_CLEAN,
    ("dns-01", False): HookEvent.CHALLENGE_DNS_01,
    ("dns-01", True): HookEvent.CHALLENGE_DNS_01_CLEAN,
    ("tls-alpn-01", False): HookEvent.CHALLENGE_TLS_ALPN_01,
    ("tls-alpn-01", True): HookEvent.CHALLENGE_TLS_ALPN_01_CLEAN,
}


def parse_event(event: str | HookEvent) -> HookEvent:
    """Return the :class:`HookEvent` named by *event*.

    Raises :class:`ValueError` for names outside :data:`KNOWN_EVENTS`.
    """
    if isinstance(event, HookEvent):
        return event
    try:
        return HookEvent(event)
    except ValueError:
        msg = f"Unknown hook event '{event}'. Known events: {sorted(KNOWN_EVENTS)}"
        raise ValueError(msg) from None


def challenge_event(challenge_type: str, clean: bool = False) -> HookEvent:
    """Map an ACME challenge type to its publish or cleanup event.

    ``challenge_event("dns-01", clean=True)`` returns
    :attr:`HookEvent.CHALLENGE_DNS_01_CLEAN`.
    """
    try:
        return _CHALLENGE_EVENTS[(challenge_type.lower(), clean)]
    except KeyError:
        msg = f"Unsupported challenge type '{challenge_type}'"
        raise ValueError(msg) from None
