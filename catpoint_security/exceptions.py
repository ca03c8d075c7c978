"""Exception types raised by the security system."""


class SecuritySystemError(Exception):
    """Base class for security system errors."""


class CatDetectorError(SecuritySystemError):
    """The cat detector could not be prepared or run."""


class ConfigurationError(SecuritySystemError):
    """Configuration is invalid or cannot be applied."""
