from .loader import get_config, get_config_path, get_token
from .options import ClientOptions
from .validator import ConfigValidationError, validate_config

__all__ = [
    "get_config",
    "get_config_path",
    "get_token",
    "ClientOptions",
    "ConfigValidationError",
    "validate_config",
]
