class ConfigError(RuntimeError):
    """Configuration validation or loading error."""


class AdapterError(RuntimeError):
    """Raised for adapter initialization failures."""


class StateFileError(RuntimeError):
    """Raised when the persisted channel state cannot be read or locked."""
