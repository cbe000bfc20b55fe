"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Required field missing or blank, or bill has no usable items"""

    pass


class PaymentError(DomainException):
    """Payment rejected; the transaction is left unmodified"""

    pass


class NonPositivePaymentError(PaymentError):
    """Payment amount is zero or negative"""

    pass


class OverpaymentError(PaymentError):
    """Payment amount exceeds the outstanding balance"""

    pass


class NotFoundError(DomainException):
    """Unknown transaction, customer or product"""

    pass


class DuplicateKeyError(DomainException):
    """Customer or product name already registered"""

    pass


class ConcurrentUpdateError(DomainException):
    """Transaction changed in storage since it was loaded"""

    pass


class TransactionBusyError(DomainException):
    """Timed out waiting for another payment on the same transaction"""

    pass


class LedgerInvariantError(DomainException):
    """Transaction totals are inconsistent with its items or payments"""

    pass
