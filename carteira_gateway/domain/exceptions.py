"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "domain_error"


class InvalidValueError(DomainException):
    """Amount is missing, non-numeric or outside the accepted range"""

    code = "invalid_value"


class UnknownCommandError(DomainException):
    """Slash text that matches no known command"""

    code = "unknown_command"


class ConfirmationFailedError(DomainException):
    """Confirmation arrived with no live pending action"""

    code = "confirmation_failed"


class NotFoundError(DomainException):
    """Referenced entity does not exist"""

    code = "not_found"


class InsufficientBalanceError(DomainException):
    """Source balance is smaller than the requested amount"""

    code = "insufficient_balance"

    def __init__(self, source: str = "saldo"):
        super().__init__(f"Insufficient {source}")
        self.source = source


class InitialBalanceRequiredError(DomainException):
    """User tried to record spending before setting an initial balance"""

    code = "initial_balance_required"


class OperationNotAllowedError(DomainException):
    """Operation has nothing to act on"""

    code = "operation_not_allowed"
