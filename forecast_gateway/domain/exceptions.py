"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class TransactionStoreError(DomainException):
    """Transaction store returned an error or is unavailable"""

    pass


class InvalidTransactionDataError(TransactionStoreError):
    """Transaction store answered with malformed transaction data"""

    pass


class InvalidScheduleError(DomainException, ValueError):
    """Recurring schedule parameters are invalid"""

    pass
