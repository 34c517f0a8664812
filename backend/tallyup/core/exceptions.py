"""
Error taxonomy for share allocation, period keying and expense entry.
"""
from decimal import Decimal


class TallyUpError(Exception):
    """Base class for all application errors."""


class ShareAllocationError(TallyUpError, ValueError):
    """A split request that must not be submitted."""


class InvalidAmount(ShareAllocationError):
    """Non-positive or non-numeric expense total."""

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Valid amount is required, got {amount!r}")


class ShareMismatch(ShareAllocationError):
    """Custom shares that do not add up to the expense total."""

    def __init__(self, total: Decimal, expected: Decimal, reason: str = None):
        self.total = total
        self.expected = expected
        self.reason = reason
        message = f"Total shares {total} must equal the expense amount {expected}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class EmptyParticipantSet(ShareAllocationError):
    """Split requested with no participants selected."""

    def __init__(self):
        super().__init__("Select at least one member")


class InvalidSplitType(ShareAllocationError):
    """Split type other than equal or custom."""

    def __init__(self, split_type):
        self.split_type = split_type
        super().__init__(f"Unknown split type {split_type!r}")


class UnparseableDate(TallyUpError, ValueError):
    """Date-like value that cannot be turned into an instant."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Cannot interpret {value!r} as a date")


class InvalidPeriodKey(TallyUpError, ValueError):
    """Period key not in YYYY-MM form."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Invalid period key {key!r}, expected YYYY-MM")


class ExpenseValidationError(TallyUpError, ValueError):
    """Expense input rejected before it is stored."""


class InvalidAdjustment(TallyUpError, ValueError):
    """Balance adjustment rejected before it is stored."""
