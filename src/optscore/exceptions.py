"""
Exceptions raised by the scoring engine.

Most data problems are not exceptions here: missing ATM pairs, missing DTE
brackets and zero-priced contracts all surface as ``None`` or neutral
defaults. Only unusable input and invalid shapes raise.
"""


class ChainNormalizationError(ValueError):
    """Raised when no record of a non-empty raw chain can be normalized."""

    def __init__(self, message: str, total_records: int = 0, rejected: int = 0):
        self.message = message
        self.total_records = total_records
        self.rejected = rejected
        super().__init__(message)


class ConfigurationError(ValueError):
    """Raised when a scoring configuration fails validation."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)
