"""Error types shared by the API and the maintenance commands."""


class ConfigurationError(RuntimeError):
    """Required configuration is missing or invalid."""
