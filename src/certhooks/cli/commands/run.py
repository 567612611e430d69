"""Run subcommand: fire one lifecycle event by hand.

Usage::

    certhooks -c config.yaml run --certificate www --event post-operation \\
        --set domains=example.com,www.example.com --set algorithm=ecdsa_p256 \\
        --set status=Renewed --set is_success=true

Context fields per event family:

- ``post-operation``: ``domains`` (comma separated), ``algorithm``,
  ``status``, ``is_success``
- ``challenge-*``: ``domain``, ``proof``, ``file_name`` (optional);
  the challenge type and cleanup flag come from the event name
- ``file-*``: ``file_path``
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from certhooks.cli.main import EXIT_CONFIG, EXIT_HOOK_FAILED, EXIT_OK, _print_error
from certhooks.hooks import (
    ChallengeContext,
    FileStorageContext,
    HookError,
    PostOperationContext,
    dispatch,
)
from certhooks.hooks.events import EVENT_CONTEXT_MAP, ContextKind, HookEvent, parse_event

if TYPE_CHECKING:
    from certhooks.hooks.context import AnyContext

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _parse_pairs(pairs: list[str], option: str) -> dict[str, str]:
    result: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"{option} expects KEY=VALUE, got '{pair}'"
            raise ValueError(msg)
        result[key] = value
    return result


def _require(fields: dict[str, str], name: str) -> str:
    try:
        return fields[name]
    except KeyError:
        msg = f"missing context field '{name}' (use --set {name}=...)"
        raise ValueError(msg) from None


def build_context(
    event: HookEvent,
    fields: dict[str, str],
    env: dict[str, str],
) -> AnyContext:
    """Build the context payload *event* carries from string fields."""
    kind = EVENT_CONTEXT_MAP[event]
    if kind is ContextKind.POST_OPERATION:
        domains = [d for d in _require(fields, "domains").split(",") if d]
        return PostOperationContext(
            domains=tuple(domains),
            algorithm=_require(fields, "algorithm"),
            status=_require(fields, "status"),
            is_success=fields.get("is_success", "true").lower() in _TRUE_VALUES,
            env=env,
        )
    if kind is ContextKind.CHALLENGE:
        # "challenge-dns-01-clean" -> ("dns-01", True)
        name = event.value.removeprefix("challenge-")
        is_clean = name.endswith("-clean")
        return ChallengeContext(
            domain=_require(fields, "domain"),
            challenge=name.removesuffix("-clean"),
            file_name=fields.get("file_name", ""),
            proof=_require(fields, "proof"),
            is_clean_hook=is_clean,
            env=env,
        )
    return FileStorageContext.from_path(_require(fields, "file_path"), env=env)


def run_hooks(config, args) -> int:
    """Dispatch one event for one certificate; return the exit status."""
    try:
        certificate = config.certificate(args.certificate)
        event = parse_event(args.event)
        fields = _parse_pairs(args.fields, "--set")
        extra_env = _parse_pairs(args.env, "--env")
        context = build_context(event, fields, certificate.env_overlay(extra_env))
    except (KeyError, ValueError) as exc:
        _print_error(str(exc.args[0]) if exc.args else str(exc))
        return EXIT_CONFIG

    try:
        results = dispatch(certificate, context, event)
    except HookError as exc:
        _print_error(str(exc))
        return EXIT_HOOK_FAILED

    for result in results:
        print(f"{result.hook_name}: {result.outcome} (exit {result.returncode})")  # noqa: T201
    if not results:
        print(f"No hooks registered for '{event}' on {certificate.name}")  # noqa: T201
    return EXIT_OK
