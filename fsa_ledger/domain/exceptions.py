"""Domain-specific exceptions"""

from decimal import Decimal


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        """Machine-readable payload for API error responses"""
        return {"code": self.code, "message": self.message}


class InvalidArgumentError(DomainException):
    """Caller supplied a malformed value"""

    code = "invalid_argument"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail["field"] = self.field
        return detail


class NotFoundError(DomainException):
    """Requested entity does not exist"""

    code = "not_found"


class InvalidStateError(DomainException):
    """Operation is not permitted in the entity's current status"""

    code = "invalid_state"


class LimitExceededError(DomainException):
    """Allocation would push the account balance above its annual limit"""

    code = "limit_exceeded"

    def __init__(self, current_balance: Decimal, annual_limit: Decimal, attempted_amount: Decimal):
        super().__init__(
            f"Allocation of ${attempted_amount:.2f} exceeds annual limit: "
            f"current balance ${current_balance:.2f}, limit ${annual_limit:.2f}"
        )
        self.current_balance = current_balance
        self.annual_limit = annual_limit
        self.attempted_amount = attempted_amount

    @property
    def remaining(self) -> Decimal:
        return self.annual_limit - self.current_balance

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail.update(
            {
                "current_balance": str(self.current_balance),
                "annual_limit": str(self.annual_limit),
                "attempted_amount": str(self.attempted_amount),
            }
        )
        return detail


class ConflictError(DomainException):
    """Uniqueness violation, such as a duplicate employee email"""

    code = "conflict"


class StorageFailureError(DomainException):
    """Transaction could not commit; all changes were rolled back"""

    code = "storage_failure"
