"""
Custom exceptions for PyHarvest.
Provides domain-specific error handling with informative messages.
"""
from typing import Any


class HarvestError(Exception):
    """Base exception for all PyHarvest errors."""
    pass


class ConfigurationError(HarvestError):
    """Raised when there are configuration-related issues."""
    pass


class SpeciesNotFoundError(ConfigurationError):
    """Raised when a species name is not found in the species registry."""
    def __init__(self, species_name: str):
        self.species_name = species_name
        super().__init__(f"Species '{species_name}' not found in the species registry.")


class IndexSpaceError(ConfigurationError):
    """Raised when a species or prescription index space is inconsistent.

    Vectors are never truncated or padded to fit; a length or index
    mismatch is rejected outright.
    """
    def __init__(self, description: str, expected: Any, actual: Any):
        self.description = description
        self.expected = expected
        self.actual = actual
        super().__init__(f"Inconsistent {description}: expected {expected}, got {actual}")


class DataError(HarvestError):
    """Raised when there are data-related issues."""
    pass


class InvalidDataError(DataError):
    """Raised when data is malformed or invalid."""
    def __init__(self, data_description: str, reason: str):
        self.data_description = data_description
        self.reason = reason
        super().__init__(f"Invalid {data_description}: {reason}")


class StandError(HarvestError):
    """Raised when stand-level accounting cannot proceed."""
    pass


class OutputError(HarvestError):
    """Raised when a log table or output map cannot be written."""
    def __init__(self, path: Any, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")


def validate_non_negative(value: float, param_name: str) -> float:
    """Validate that a value is not negative.

    Args:
        value: Value to validate
        param_name: Parameter name for error message

    Returns:
        The validated value

    Raises:
        InvalidDataError: If value is negative
    """
    if value < 0:
        raise InvalidDataError(param_name, f"must not be negative, got {value}")
    return value


def validate_positive(value: float, param_name: str) -> float:
    """Validate that a value is positive.

    Raises:
        ConfigurationError: If value is not positive
    """
    if value <= 0:
        raise ConfigurationError(f"Invalid value for parameter '{param_name}': {value} (must be positive)")
    return value
