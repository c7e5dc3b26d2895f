from typing import Optional


class ReceiptError(Exception):
    """Base for failures surfaced to callers of the receipt workflow."""

    status_code = 500
    default_message = "Receipt request failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidRequest(ReceiptError):
    status_code = 400
    default_message = "Payment ID is required"


class PaymentNotFound(ReceiptError):
    status_code = 404
    default_message = "Payment not found"


class ReceiptNotFound(ReceiptError):
    status_code = 404
    default_message = "Receipt not found"


class PersistenceError(ReceiptError):
    """The receipt write did not go through. Safe to retry."""

    status_code = 500
    default_message = "Failed to create receipt"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class StoreError(Exception):
    """Raised by store implementations when the backing database fails."""


class DuplicateReceipt(StoreError):
    """A receipt for the payment was written by someone else first."""

    def __init__(self, payment_id):
        super().__init__(f"Receipt already exists for payment {payment_id}")
        self.payment_id = payment_id
