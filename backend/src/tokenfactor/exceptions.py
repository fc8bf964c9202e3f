"""
Exception taxonomy for asset, ledger and exchange operations.

Every core operation either succeeds completely or raises exactly one of
these, leaving stored state unchanged. Failures are deterministic functions
of the input state, so callers may retry only with corrected inputs.
"""


class TokenFactorError(Exception):
    """Base exception for all tokenfactor errors."""


class AlreadyExists(TokenFactorError):
    """Raised when an asset number or token id is already taken."""


class NotFound(TokenFactorError):
    """Raised when an asset or token does not exist."""


class AlreadySettled(TokenFactorError):
    """Raised when mutating settlement data of a settled asset."""


class TenureTooShort(TokenFactorError):
    """Raised when due date minus invoice date is below the tenure floor."""


class InvalidRecipient(TokenFactorError):
    """Raised when the recipient identity is null or empty."""


class NotAuthorized(TokenFactorError):
    """Raised when the caller lacks the capability for an operation."""


class ArithmeticOverflow(TokenFactorError):
    """Raised when a fixed-point computation leaves the representable range."""


class InvalidAsset(TokenFactorError):
    """Raised by the exchange for an asset the registry does not know."""


class InsufficientAllowance(TokenFactorError):
    """Raised when the spender allowance does not cover a transfer."""


class InsufficientBalance(TokenFactorError):
    """Raised when the owner balance does not cover a transfer."""


class TransferRejected(TokenFactorError):
    """Raised when a safe transfer targets an identity that cannot receive."""
