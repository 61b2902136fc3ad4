"""Error taxonomy and status codes for STOMP cost functions."""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Out-of-band status returned by the bind call."""

    SUCCESS = 1
    FAILURE = 99999
    INVALID_GROUP_NAME = -15
    INVALID_ROBOT_STATE = -17


class StompCostError(Exception):
    """Base class for all cost-function errors."""


class ConfigurationError(StompCostError):
    """Missing or malformed parameter, or distance field construction failure.

    Attributes:
        key: Name of the offending parameter, if any.
    """

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class MissingParameterError(ConfigurationError):
    """A required parameter is absent from the configuration input."""

    def __init__(self, key: str):
        super().__init__(f"missing required parameter '{key}'", key=key)


class InvalidParameterError(ConfigurationError):
    """A parameter is present but cannot be used as a positive real."""


class BindError(StompCostError):
    """The planning context could not be bound for this attempt."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.FAILURE):
        super().__init__(message)
        self.error_code = error_code


class EvaluationPreconditionError(StompCostError):
    """Evaluation requested without a bound context or outside batch bounds."""
