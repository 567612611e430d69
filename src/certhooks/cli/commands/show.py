"""List subcommand: show certificates and the hooks they run.

Usage::

    certhooks -c config.yaml list
"""

from __future__ import annotations

import json

from certhooks.logging.sanitize import sanitize_env


def show_certificates(config) -> None:
    """Print every certificate with its resolved hooks as JSON."""
    result = [
        {
            "name": cert.name,
            "env": sanitize_env(cert.env),
            "hooks": [
                {
                    "name": hook.name,
                    "events": [str(e) for e in hook.events],
                    "cmd": hook.cmd,
                    "allow_failure": hook.allow_failure,
                }
                for hook in cert.hooks
            ],
        }
        for cert in config.certificates
    ]
    print(json.dumps(result, indent=2))  # noqa: T201
