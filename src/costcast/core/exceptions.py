"""Custom exceptions for costcast"""


class CostcastError(Exception):
    """Base exception for all costcast errors"""
    pass


class InsufficientDataError(CostcastError):
    """Raised when a series is too short for the requested computation"""
    def __init__(self, operation: str, required: int, actual: int):
        self.operation = operation
        self.required = required
        self.actual = actual
        super().__init__(
            f"Insufficient data for {operation}: need at least {required} "
            f"points, got {actual}"
        )


class InvalidInputError(CostcastError):
    """Raised when costs, dates or parameters are malformed"""
    pass


class InvalidConfigurationError(CostcastError):
    """Raised when a forecast horizon or setting is out of bounds"""
    pass


class DataLoadError(CostcastError):
    """Raised when an input file cannot be read or parsed"""
    pass
