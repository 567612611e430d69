"""Sensitive data sanitization for log output.

Provides :func:`sanitize_for_logs` which redacts key material (PEM
bodies) and secret-looking environment values from data before it is
written to the log.  Hooks routinely receive private keys on stdin and
API tokens through their environment.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

# Substrings marking an environment variable as secret
_SECRET_KEY_MARKERS = ("TOKEN", "SECRET", "PASSWORD", "PASS", "KEY", "CREDENTIAL")

# Regex matching the base64 body inside PEM blocks
_PEM_BODY_RE = re.compile(
    r"(-----BEGIN [A-Z0-9 ]+-----)"
    r"([\s\S]*?)"
    r"(-----END [A-Z0-9 ]+-----)",
)


def is_secret_name(name: str) -> bool:
    """Whether an environment variable name looks like it holds a secret."""
    upper = name.upper()
    return any(marker in upper for marker in _SECRET_KEY_MARKERS)


def sanitize_env(env: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of *env* with secret-looking values replaced.

    Keys are preserved so the set of variables is still visible.
    """
    return {key: "[REDACTED]" if is_secret_name(key) else value for key, value in env.items()}


def sanitize_pem(pem: str) -> str:
    """Replace the base64 body of PEM blocks with ``[REDACTED]``.

    Preserves BEGIN/END markers so the type of object is still visible.
    """

    def _redact(m) -> str:
        return f"{m.group(1)}\n[REDACTED]\n{m.group(3)}"

    return _PEM_BODY_RE.sub(_redact, pem)


def sanitize_for_logs(data: Any) -> Any:  # noqa: ANN401
    """Recursively sanitize sensitive material in *data*.

    Dicts are treated as environment mappings, lists and tuples are
    walked, and PEM blocks inside strings are redacted.  Everything
    else passes through unchanged.
    """
    if isinstance(data, Mapping):
        return {
            k: "[REDACTED]" if isinstance(k, str) and is_secret_name(k) else sanitize_for_logs(v)
            for k, v in data.items()
        }

    if isinstance(data, (list, tuple)):
        return type(data)(sanitize_for_logs(item) for item in data)

    if isinstance(data, str):
        if "-----BEGIN " in data:
            return sanitize_pem(data)
        return data

    return data
