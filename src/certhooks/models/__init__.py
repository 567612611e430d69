"""Domain entities."""

from certhooks.models.certificate import Certificate

__all__ = ["Certificate"]
