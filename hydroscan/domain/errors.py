# hydroscan/domain/errors.py


class HydroScanError(Exception):
    """Base class for every error the order pipeline reports to callers."""


class ValidationError(HydroScanError, ValueError):
    """Bad input: empty cart, invalid quantity, bad scheduling date."""


class NotLoggedIn(HydroScanError, PermissionError):
    """No acting user in the session context."""

    def __init__(self, message: str = "User not logged in"):
        super().__init__(message)


class NotFound(HydroScanError, LookupError):
    pass


class PersistenceFailure(HydroScanError):
    """The store rejected a write; the transaction was rolled back."""


class IllegalStateTransition(HydroScanError):
    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change order status from {current} to {requested}")


class InsufficientBalance(HydroScanError):
    def __init__(self, owner_id: str, requested: int, available: int):
        self.owner_id = owner_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"HydroCoin debit of {requested} exceeds balance {available} for user {owner_id}"
        )
