from .loader import (
    AipcheckConfig,
    ConfigError,
    OUTPUT_FORMATS,
    PLUGIN_GROUP,
    load_config_from_path,
    parse_config,
)

__all__ = [
    "AipcheckConfig",
    "ConfigError",
    "OUTPUT_FORMATS",
    "PLUGIN_GROUP",
    "load_config_from_path",
    "parse_config",
]
