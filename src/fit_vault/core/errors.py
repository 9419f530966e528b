"""
Exception taxonomy for fit-vault.

Codecs never raise; everything here is raised by repositories and the
session engine.
"""


class FitVaultError(Exception):
    """Base class for all fit-vault errors."""

    pass


class ValidationError(FitVaultError):
    """Raised when user input is rejected before any mutation or I/O."""

    pass


class RecordNotFoundError(FitVaultError):
    """Raised when an update targets a record that does not exist."""

    pass


class RecordExistsError(FitVaultError):
    """Raised when creating a record whose id is already taken."""

    pass


class InvalidTransitionError(FitVaultError):
    """Raised on an illegal session status transition."""

    def __init__(self, from_status: str, to_status: str):
        super().__init__(f"Invalid session transition: {from_status} -> {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class SessionStateError(FitVaultError):
    """Raised when an engine operation is not possible in the current state."""

    pass
