"""Exceptions raised by flakiness detection."""


class ConfigurationError(Exception):
    """Raised when detection options are invalid."""


class InvalidCommandError(ConfigurationError):
    """Raised when the test command is missing or not a string."""


class InvalidRunsError(ConfigurationError):
    """Raised when the run count is out of range or not a whole number."""


class InvalidThresholdError(ConfigurationError):
    """Raised when the threshold is out of range or not finite."""
