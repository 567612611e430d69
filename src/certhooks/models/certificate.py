"""Certificate entity as seen by the hook engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from certhooks.config.settings import HookDefinition
    from certhooks.hooks.events import HookEvent


@dataclass(frozen=True)
class Certificate:
    name: str
    hooks: tuple[HookDefinition, ...] = ()
    env: dict[str, str] = field(default_factory=dict)

    def hooks_for(self, event: HookEvent) -> list[HookDefinition]:
        """Hooks registered for *event*, in configured order."""
        return [hook for hook in self.hooks if hook.matches(event)]

    def env_overlay(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        """The certificate's environment with *extra* entries on top."""
        merged = dict(self.env)
        merged.update(extra or {})
        return merged
