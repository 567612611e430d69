"""Per-event context payloads handed to hooks.

Each lifecycle event family has its own payload type.  The three types
are deliberately unrelated dataclasses: all they share is the
:class:`HookContext` capability, i.e. a field view for templating and a
merged child-process environment.

Contexts are frozen.  ``env`` holds the caller's environment overlay,
which is layered over the inherited process environment whenever the
merged view is requested.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Protocol, runtime_checkable

from certhooks.hooks.environment import merge_environment
from certhooks.hooks.events import ContextKind


@runtime_checkable
class HookContext(Protocol):
    """What the renderer and the invoker need from a context."""

    kind: ClassVar[ContextKind]
    env: Mapping[str, str]

    def template_fields(self) -> dict[str, Any]: ...

    def environment(self) -> list[tuple[str, str]]: ...


def _own_env(ctx: Any) -> None:
    # Frozen dataclass: detach the overlay from the caller's mapping.
    object.__setattr__(ctx, "env", dict(ctx.env))


def _template_fields(ctx: Any) -> dict[str, Any]:
    data = {f.name: getattr(ctx, f.name) for f in dataclasses.fields(ctx) if f.name != "env"}
    data["env"] = merge_environment(ctx.env)
    return data


def _environment(ctx: Any) -> list[tuple[str, str]]:
    return list(merge_environment(ctx.env).items())


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PostOperationContext:
    """Data for hooks run after an issuance or renewal attempt.

    Template fields: ``domains``, ``algorithm``, ``status``,
    ``is_success``, ``env``.
    """

    kind: ClassVar[ContextKind] = ContextKind.POST_OPERATION

    domains: tuple[str, ...]
    algorithm: str
    status: str
    is_success: bool
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "domains", tuple(self.domains))
        _own_env(self)

    def template_fields(self) -> dict[str, Any]:
        return _template_fields(self)

    def environment(self) -> list[tuple[str, str]]:
        return _environment(self)


@dataclass(frozen=True)
class ChallengeContext:
    """Data for hooks that publish or clean up a challenge proof.

    Template fields: ``domain``, ``challenge``, ``file_name``, ``proof``,
    ``is_clean_hook``, ``env``.  ``file_name`` is the HTTP-01 token file
    name and is empty for other challenge types.
    """

    kind: ClassVar[ContextKind] = ContextKind.CHALLENGE

    domain: str
    challenge: str
    file_name: str
    proof: str
    is_clean_hook: bool = False
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _own_env(self)

    def template_fields(self) -> dict[str, Any]:
        return _template_fields(self)

    def environment(self) -> list[tuple[str, str]]:
        return _environment(self)


@dataclass(frozen=True)
class FileStorageContext:
    """Data for hooks run around a managed file being written.

    Template fields: ``file_name``, ``file_directory``, ``file_path``,
    ``env``.
    """

    kind: ClassVar[ContextKind] = ContextKind.FILE_STORAGE

    file_name: str
    file_directory: str
    file_path: str
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "file_path", str(self.file_path))
        _own_env(self)

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        env: Mapping[str, str] | None = None,
    ) -> FileStorageContext:
        """Build a context from a file path, deriving name and directory."""
        p = Path(path)
        return cls(
            file_name=p.name,
            file_directory=str(p.parent),
            file_path=str(p),
            env=env or {},
        )

    def template_fields(self) -> dict[str, Any]:
        return _template_fields(self)

    def environment(self) -> list[tuple[str, str]]:
        return _environment(self)


AnyContext = PostOperationContext | ChallengeContext | FileStorageContext
