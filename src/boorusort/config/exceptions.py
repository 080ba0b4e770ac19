"""Exceptions raised while loading boorusort configuration."""


class ConfigError(Exception):
    """Raised when configuration data cannot be read or validated."""


class UnsupportedConfigFileError(ConfigError):
    """Raised when a config file does not use a YAML extension."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File is not a config file type (.yaml, .yml): {path}")
        self.path = path
