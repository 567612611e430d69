"""Typed, frozen dataclasses for every configuration section.

This module is the **single source of truth** for default values.
JSON Schema defaults exist only for documentation; these builders
are what the application actually reads.

Access pattern::

    from certhooks.config import get_config

    for hook in get_config().settings.hooks:
        print(hook.name, hook.events)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from certhooks.hooks.events import HookEvent

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingSettings:
    """Log level and output format (``text`` or ``json``)."""

    level: str
    format: str


def _build_logging(data: dict | None) -> LoggingSettings:
    d = data or {}
    return LoggingSettings(
        level=d.get("level", "INFO"),
        format=d.get("format", "text"),
    )


# ---------------------------------------------------------------------------
# Global
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GlobalSettings:
    """Settings shared by every certificate."""

    env: dict[str, str]


def _build_global(data: dict | None) -> GlobalSettings:
    d = data or {}
    return GlobalSettings(env=_build_env(d.get("env")))


def _env_value(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _build_env(data: dict | None) -> dict[str, str]:
    """Stringify env values; booleans become ``true``/``false``."""
    return {str(k): _env_value(v) for k, v in (data or {}).items()}


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HookDefinition:
    """A single external command bound to one or more lifecycle events.

    ``cmd``, ``args``, ``stdin``, ``stdout`` and ``stderr`` are templates
    rendered against the event context.  A missing ``stdout``/``stderr``
    discards that stream; a missing ``stdin`` gives the child empty input.
    """

    name: str
    events: tuple[HookEvent, ...]
    cmd: str
    args: tuple[str, ...] | None = None
    stdin: str | None = None
    stdout: str | None = None
    stderr: str | None = None
    allow_failure: bool = False

    def matches(self, event: HookEvent) -> bool:
        """Whether this hook is registered for *event*."""
        return event in self.events

    def __str__(self) -> str:
        return self.name


def _build_hook(entry: dict) -> HookDefinition:
    raw_events = entry.get("type", [])
    if isinstance(raw_events, str):
        raw_events = [raw_events]
    name = entry["name"]
    if not raw_events:
        log.warning("Hook '%s' has no event type and will never run", name)

    args = entry.get("args")
    return HookDefinition(
        name=name,
        events=tuple(HookEvent(evt) for evt in raw_events),
        cmd=entry["cmd"],
        args=None if args is None else tuple(str(a) for a in args),
        stdin=entry.get("stdin"),
        stdout=entry.get("stdout"),
        stderr=entry.get("stderr"),
        allow_failure=entry.get("allow_failure", False),
    )


def _build_hooks(data: list | None) -> tuple[HookDefinition, ...]:
    return tuple(_build_hook(entry) for entry in data or [])


@dataclass(frozen=True)
class HookGroupSettings:
    """Named list of hooks and/or other groups."""

    name: str
    hooks: tuple[str, ...]


def _build_groups(data: list | None) -> tuple[HookGroupSettings, ...]:
    return tuple(
        HookGroupSettings(name=entry["name"], hooks=tuple(entry.get("hooks", [])))
        for entry in data or []
    )


# ---------------------------------------------------------------------------
# Certificates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CertificateSettings:
    """A managed certificate's hook references and environment."""

    name: str
    hooks: tuple[str, ...]
    env: dict[str, str]


def _build_certificates(data: list | None) -> tuple[CertificateSettings, ...]:
    return tuple(
        CertificateSettings(
            name=entry["name"],
            hooks=tuple(entry.get("hooks", [])),
            env=_build_env(entry.get("env")),
        )
        for entry in data or []
    )


# ---------------------------------------------------------------------------
# Root settings aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CertHooksSettings:
    logging: LoggingSettings
    global_settings: GlobalSettings
    hooks: tuple[HookDefinition, ...]
    groups: tuple[HookGroupSettings, ...]
    certificates: tuple[CertificateSettings, ...]


def build_settings(data: dict[str, Any]) -> CertHooksSettings:
    """Build the full typed settings tree from raw config data.

    Called once during :class:`CertHooksConfig` initialization after
    schema validation and environment-variable resolution.
    """
    return CertHooksSettings(
        logging=_build_logging(data.get("logging")),
        global_settings=_build_global(data.get("global")),
        hooks=_build_hooks(data.get("hooks")),
        groups=_build_groups(data.get("groups")),
        certificates=_build_certificates(data.get("certificates")),
    )
