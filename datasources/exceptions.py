# datasources/exceptions.py

import math
from typing import Optional


class DataSourceError(Exception):
    pass


class DataSourceUnavailable(DataSourceError):
    pass


class RetryExhaustedError(DataSourceError):
    def __init__(self, attempts: int, last_error: Optional[BaseException]) -> None:
        self.attempts = attempts
        self.last_error = last_error
        detail = str(last_error) if last_error is not None else "unknown error"
        super().__init__(f"Operation failed after {attempts} attempts. Last error: {detail}")


class CircuitOpenError(DataSourceError):
    def __init__(self, message: str = "Circuit breaker is OPEN - service temporarily unavailable") -> None:
        super().__init__(message)


class RateLimitExceededError(DataSourceError):
    def __init__(self, retry_after: float) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded. Try again in {max(0, math.ceil(retry_after))} seconds")


class DataRangeUnavailable(ValueError):
    """Request asks a source for a location or date range it cannot serve."""
