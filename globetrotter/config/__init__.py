# Makes the config directory a package and exposes key classes

from .config_models import Settings
from .loader import ConfigLoader, get_app_config

__all__ = ["Settings", "ConfigLoader", "get_app_config"]
