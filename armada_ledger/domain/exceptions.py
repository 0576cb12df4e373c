"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class TransactionNotFoundError(DomainException):
    """Referenced transaction does not exist"""

    pass


class TransactionAlreadyCompletedError(DomainException):
    """Transaction has already been sold and split"""

    pass


class ActiveTransactionExistsError(DomainException):
    """Unit already has a transaction in progress"""

    pass


class ProfitSharingNotFoundError(DomainException):
    """Transaction has no profit sharing record yet"""

    pass


class InvalidShareSplitError(DomainException):
    """Investor/manager percentages are out of range or do not add up to 100"""

    pass


class SaleDetailsMissingError(DomainException):
    """Transaction cannot complete without a sell date and sell price"""

    pass
