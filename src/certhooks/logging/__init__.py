"""Logging subsystem for certhooks.

Public API::

    from certhooks.logging import configure_logging

    configure_logging(settings.logging)
"""

from certhooks.logging.setup import configure_logging

__all__ = ["configure_logging"]
