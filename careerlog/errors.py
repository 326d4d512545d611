class CareerLogError(Exception):
    """Base class for career log errors."""


class ConfigNodeParseError(CareerLogError):
    """Raised when persisted node text cannot be parsed."""


class SettingsError(CareerLogError):
    """Raised when a settings document holds values of the wrong shape."""


class ExportError(CareerLogError):
    """Raised when an export destination cannot be written."""
