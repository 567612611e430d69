"""Configuration subsystem for certhooks.

Public API::

    from certhooks.config import get_config, CertHooksConfig

    # At startup (CLI only):
    CertHooksConfig(config_file="config.yaml")

    # Everywhere else:
    cfg  = get_config()
    cert = cfg.certificate("www")
"""

from certhooks.config.certhooks_config import (
    CertHooksConfig,
    ConfigValidationError,
    get_config,
)
from certhooks.config.settings import (
    CertHooksSettings,
    CertificateSettings,
    GlobalSettings,
    HookDefinition,
    HookGroupSettings,
    LoggingSettings,
)

__all__ = [
    "CertHooksConfig",
    "CertHooksSettings",
    "CertificateSettings",
    "ConfigValidationError",
    "GlobalSettings",
    "HookDefinition",
    "HookGroupSettings",
    "LoggingSettings",
    "get_config",
]
