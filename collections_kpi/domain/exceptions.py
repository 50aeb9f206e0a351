"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidParametersError(DomainException):
    """Parameter update does not satisfy the configuration contract"""

    pass


class UnknownPeriodError(DomainException):
    """Period name is not one of the supported filter windows"""

    pass


class SpreadsheetReadError(DomainException):
    """Spreadsheet file is missing, unsupported or unreadable"""

    pass
