"""certhooks: hook execution engine for certificate lifecycle automation."""

__version__ = "1.0.0"
