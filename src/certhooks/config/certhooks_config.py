"""certhooks configuration loader.

Typical use::

    CertHooksConfig(config_file="/etc/certhooks/config.yaml")   # CLI, once

    from certhooks.config import get_config
    get_config().certificate("www").hooks_for(HookEvent.POST_OPERATION)

A file goes through five stages, each of which may reject it with
:class:`ConfigValidationError`: YAML/JSON parsing, substitution of
whole-value ``${VAR}`` / ``${VAR:-default}`` references from the process
environment, JSON schema validation, cross-reference checks, and
finally construction of the frozen settings tree and the
:class:`~certhooks.models.Certificate` objects.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft7Validator

from certhooks.config.settings import CertHooksSettings, build_settings
from certhooks.hooks.events import KNOWN_EVENTS
from certhooks.models.certificate import Certificate

_SCHEMA_PATH = Path(__file__).parent / "schema.json"

# Only values consisting of a single reference are substituted, so hook
# templates and shell snippets containing ``${...}`` pass through.
_ENV_REF = re.compile(r"\$\{(?P<name>[^}:]+?)(?::-(?P<default>.*))?\}", re.DOTALL)

log = logging.getLogger(__name__)

_instance: CertHooksConfig | None = None


def get_config() -> CertHooksConfig:
    """Return the loaded configuration.

    Raises :class:`RuntimeError` when no :class:`CertHooksConfig` has
    been constructed in this process.
    """
    if _instance is None:
        msg = "Configuration not initialised: construct CertHooksConfig(config_file=...) first"
        raise RuntimeError(msg)
    return _instance


class ConfigValidationError(Exception):
    """The configuration file was rejected.

    ``errors`` lists every problem found, one ``"location: message"``
    string each.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        lines = "".join(f"\n  - {e}" for e in errors)
        super().__init__(f"Configuration validation failed:{lines}")


# ---------------------------------------------------------------------------
# ${VAR} substitution
# ---------------------------------------------------------------------------


def _substitute(value: str, where: str) -> str:
    match = _ENV_REF.fullmatch(value)
    if match is None:
        return value
    name, default = match.group("name", "default")
    if name in os.environ:
        return os.environ[name]
    if default is not None:
        return default
    msg = f"{where}: environment variable '{name}' is not set and has no default"
    raise ConfigValidationError([msg])


def _resolve_env_vars(node: Any, where: str = "") -> Any:  # noqa: ANN401
    """Return a copy of *node* with ``${VAR}`` string values substituted."""
    if isinstance(node, str):
        return _substitute(node, where or "<root>")
    if isinstance(node, dict):
        return {
            key: _resolve_env_vars(value, f"{where}.{key}" if where else str(key))
            for key, value in node.items()
        }
    if isinstance(node, list):
        return [_resolve_env_vars(item, f"{where}[{i}]") for i, item in enumerate(node)]
    return node


def _format_path(parts: Any) -> str:  # noqa: ANN401
    out = ""
    for part in parts:
        out += f"[{part}]" if isinstance(part, int) else (f".{part}" if out else str(part))
    return out or "<root>"


# ---------------------------------------------------------------------------
# Config class
# ---------------------------------------------------------------------------


class CertHooksConfig:
    """Loaded, validated hook configuration.

    Construction either succeeds completely or raises; the instance then
    becomes what :func:`get_config` returns.  :pyattr:`certificates`
    holds the resolved certificates, :pyattr:`settings` the typed tree.
    """

    def __init__(self, *, config_file: str | Path) -> None:
        global _instance  # noqa: PLW0603

        self._config_file = Path(config_file)
        self._data = self._load()
        self._validate_schema()
        self.additional_checks()
        self._settings: CertHooksSettings = build_settings(self._data)
        self._certificates = self._build_certificates()
        _instance = self

    # -- loading ------------------------------------------------------------

    def _load(self) -> dict[str, Any]:
        """Parse the file by suffix and substitute environment references."""
        with open(self._config_file, encoding="utf-8") as f:  # noqa: PTH123
            try:
                if self._config_file.suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
            except (yaml.YAMLError, json.JSONDecodeError) as exc:
                raise ConfigValidationError([f"{self._config_file}: {exc}"]) from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigValidationError(
                [f"{self._config_file}: top level must be a mapping"],
            )
        return _resolve_env_vars(data)

    def _validate_schema(self) -> None:
        schema = json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))
        validator = Draft7Validator(schema)
        found = sorted(
            validator.iter_errors(self._data),
            key=lambda e: [str(p) for p in e.absolute_path],
        )
        errors = [f"{_format_path(err.absolute_path)}: {err.message}" for err in found]
        if errors:
            raise ConfigValidationError(errors)

    # -- typed access -------------------------------------------------------

    @property
    def data(self) -> dict[str, Any]:
        """Raw configuration after env-var resolution."""
        return self._data

    @property
    def settings(self) -> CertHooksSettings:
        """Typed settings tree."""
        return self._settings

    @property
    def certificates(self) -> tuple[Certificate, ...]:
        """Every configured certificate with its hook list resolved."""
        return self._certificates

    def certificate(self, name: str) -> Certificate:
        """Return the certificate called *name*.

        Raises :class:`KeyError` when no such certificate is configured.
        """
        for cert in self._certificates:
            if cert.name == name:
                return cert
        msg = f"Unknown certificate '{name}'"
        raise KeyError(msg)

    # -- cross-field validation ---------------------------------------------

    def additional_checks(self) -> None:  # noqa: C901, PLR0912
        """Checks the schema cannot express.

        Name clashes, dangling hook or group references and group cycles
        are collected and raised together.
        """
        errors: list[str] = []
        warnings: list[str] = []

        hooks = self._data.get("hooks") or []
        groups = self._data.get("groups") or []
        certificates = self._data.get("certificates") or []

        # -- names --
        seen: set[str] = set()
        for section, entries in (("hooks", hooks), ("groups", groups)):
            for idx, entry in enumerate(entries):
                name = entry.get("name")
                if name in seen:
                    errors.append(
                        f"{section}[{idx}].name: duplicate hook or group name '{name}'",
                    )
                seen.add(name)

        cert_names: set[str] = set()
        for idx, entry in enumerate(certificates):
            name = entry.get("name")
            if name in cert_names:
                errors.append(
                    f"certificates[{idx}].name: duplicate certificate name '{name}'",
                )
            cert_names.add(name)

        # -- events --
        for idx, entry in enumerate(hooks):
            events = entry.get("type", [])
            if isinstance(events, str):
                events = [events]
            unknown = sorted(set(events) - KNOWN_EVENTS)
            if unknown:
                errors.append(
                    f"hooks[{idx}].type: unknown event(s) {unknown}. "
                    f"Known events: {sorted(KNOWN_EVENTS)}",
                )

        # -- references --
        for idx, entry in enumerate(groups):
            for ref in entry.get("hooks", []):
                if ref not in seen:
                    errors.append(
                        f"groups[{idx}].hooks: unknown hook or group '{ref}'",
                    )
        for idx, entry in enumerate(certificates):
            refs = entry.get("hooks", [])
            for ref in refs:
                if ref not in seen:
                    errors.append(
                        f"certificates[{idx}].hooks: unknown hook or group '{ref}'",
                    )
            if not refs:
                warnings.append(
                    f"certificates[{idx}] '{entry.get('name')}' has no hooks",
                )

        # -- group cycles --
        members = {g.get("name"): list(g.get("hooks", [])) for g in groups}
        for name in members:
            cycle = _find_cycle(name, members, [])
            if cycle is not None:
                errors.append(
                    f"groups: cycle detected: {' -> '.join(cycle)}",
                )
                break

        for w in warnings:
            log.warning("Config warning: %s", w)

        if errors:
            raise ConfigValidationError(errors)

    # -- certificates -------------------------------------------------------

    def _build_certificates(self) -> tuple[Certificate, ...]:
        hooks_by_name = {h.name: h for h in self._settings.hooks}
        groups = {g.name: g.hooks for g in self._settings.groups}
        global_env = self._settings.global_settings.env

        result = []
        for entry in self._settings.certificates:
            names: list[str] = []
            for ref in entry.hooks:
                _expand(ref, groups, names)
            env = dict(global_env)
            env.update(entry.env)
            result.append(
                Certificate(
                    name=entry.name,
                    hooks=tuple(hooks_by_name[n] for n in names),
                    env=env,
                ),
            )
        return tuple(result)

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded configuration (tests only)."""
        global _instance  # noqa: PLW0603
        _instance = None

    def __repr__(self) -> str:
        return f"<CertHooksConfig config_file={self._config_file}>"


def _find_cycle(
    name: str,
    members: dict[str, list[str]],
    trail: list[str],
) -> list[str] | None:
    if name in trail:
        return [*trail[trail.index(name) :], name]
    for child in members.get(name, []):
        if child in members:
            cycle = _find_cycle(child, members, [*trail, name])
            if cycle is not None:
                return cycle
    return None


def _expand(ref: str, groups: dict[str, tuple[str, ...]], out: list[str]) -> None:
    """Append the hook names *ref* stands for, depth-first, without repeats."""
    if ref in groups:
        for child in groups[ref]:
            _expand(child, groups, out)
    elif ref not in out:
        out.append(ref)
