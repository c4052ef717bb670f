"""
Exception types raised by the sentiment pipeline.
"""


class SentimentError(Exception):
    """Base class for all errors raised by review_sentiment."""
    pass


class LoadError(SentimentError):
    """Exception raised when a vocabulary resource cannot be loaded."""
    pass


class AdapterError(SentimentError):
    """Exception raised when the inference backend fails."""
    pass


class ConfigError(SentimentError):
    """Exception raised for missing or invalid configuration."""
    pass


class InputError(SentimentError):
    """Exception raised when review input data cannot be read."""
    pass
