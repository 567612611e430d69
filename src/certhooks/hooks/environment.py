"""Process environment access.

The inherited environment is process-wide ambient state.  Everything in
:mod:`certhooks` reads it through :func:`read_process_environment` only,
so tests can substitute a fixed snapshot with a single patch.
"""

from __future__ import annotations

import os
from collections.abc import Mapping


def read_process_environment() -> dict[str, str]:
    """Return a snapshot copy of the current process environment."""
    return dict(os.environ)


def merge_environment(
    overlay: Mapping[str, str],
    inherited: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Layer *overlay* on top of the inherited environment.

    Overlay entries replace inherited ones on key collision.  When
    *inherited* is ``None`` the live process environment is used; it is
    read, never modified.
    """
    base = read_process_environment() if inherited is None else inherited
    merged = dict(base)
    merged.update(overlay)
    return merged
