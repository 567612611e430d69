"""Root conftest for the certhooks test suite."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

# ---------------------------------------------------------------------------
# Make ``src/`` importable without installing the package
# ---------------------------------------------------------------------------
_SRC = str(Path(__file__).resolve().parent.parent / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)


# ---------------------------------------------------------------------------
# Deterministic inherited environment
# ---------------------------------------------------------------------------


@pytest.fixture()
def fixed_environ():
    """Replace the inherited process environment with a fixed snapshot.

    ``PATH`` is kept so hook commands can still be found.  Yields the
    snapshot dict; tests may add entries before invoking hooks.
    """
    snapshot = {
        "PATH": os.environ.get("PATH", os.defpath),
        "LANG": "C",
        "CERTHOOKS_TEST": "inherited",
    }
    with patch(
        "certhooks.hooks.environment.read_process_environment",
        side_effect=lambda: dict(snapshot),
    ):
        yield snapshot


# ---------------------------------------------------------------------------
# Minimal config data shared by multiple test modules
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimal_config_data() -> dict:
    """Return a small but complete configuration dict."""
    return {
        "hooks": [
            {
                "name": "publish",
                "type": ["challenge-http-01"],
                "cmd": "/bin/true",
            },
            {
                "name": "clean",
                "type": ["challenge-http-01-clean"],
                "cmd": "/bin/true",
            },
            {
                "name": "reload",
                "type": ["post-operation"],
                "cmd": "/bin/true",
                "allow_failure": True,
            },
        ],
        "groups": [
            {"name": "http", "hooks": ["publish", "clean"]},
        ],
        "certificates": [
            {"name": "www", "hooks": ["http", "reload"]},
        ],
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, minimal_config_data: dict) -> Path:
    """Write *minimal_config_data* to a temp YAML file and return its path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        yaml.safe_dump(minimal_config_data, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return cfg


# ---------------------------------------------------------------------------
# Config singleton cleanup (autouse)
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def fresh_config():
    """Reset the CertHooksConfig singleton before and after every test."""
    from certhooks.config.certhooks_config import CertHooksConfig

    CertHooksConfig.reset()
    yield
    CertHooksConfig.reset()


# ---------------------------------------------------------------------------
# Logger state restored after configure_logging()
# ---------------------------------------------------------------------------


@pytest.fixture()
def restore_certhooks_logger():
    """Undo configure_logging() so later tests still see propagated records."""
    logger = logging.getLogger("certhooks")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]
