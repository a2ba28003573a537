"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAdjustmentTypeError(DomainException):
    """Discount or tax carries a type other than 'amount' or 'percent'"""

    pass


class InvalidSortFieldError(DomainException):
    """Sort requested on a field the record type does not have"""

    pass


class SequenceExhaustedError(DomainException):
    """All 9999 sequence numbers for a prefix/date are taken"""

    pass


class RecordNotFoundError(DomainException):
    """Storage has no document with the requested id"""

    pass


class ImmutableFieldError(DomainException):
    """Edit attempted to change a field that is fixed after creation"""

    pass
