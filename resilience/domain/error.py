"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


# ============================================================================
# Profile store contract
# ============================================================================


class StoreError(DomainError):
    """Raised by a repository when the underlying store fails."""

    pass


class StoreConstraintError(StoreError):
    """Raised by a repository when the store rejects a write on a constraint."""

    pass


# ============================================================================
# Profile reconciliation
# ============================================================================


class ReconciliationError(DomainError):
    """Base error for a failed profile reconciliation.

    Attributes:
        step: Name of the reconciliation step that failed
    """

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"Profile reconciliation failed at '{step}': {message}")


class MissingIdentityError(ReconciliationError):
    """The identity has no subject id. No writes were performed."""

    def __init__(self):
        super().__init__("validate", "identity has no subject id")


class StoreUnavailableError(ReconciliationError):
    """A store read or write failed. Retrying the whole run is safe."""

    pass


class ConstraintViolationError(ReconciliationError):
    """The store rejected a write on its uniqueness constraint.

    Retrying once takes the existing-profile branch.
    """

    pass
