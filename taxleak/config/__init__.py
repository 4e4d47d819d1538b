"""
taxleak v0.1.0

Configuration management for taxleak.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

from .schema import DEFAULT_CONFIG, load_config, save_config_template, validate_config
from .settings import LeakageSettings

__all__ = [
    "DEFAULT_CONFIG",
    "load_config",
    "save_config_template",
    "validate_config",
    "LeakageSettings",
]
