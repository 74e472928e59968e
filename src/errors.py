"""Errors that abort a whole workbook parse."""


class WorkbookFormatError(ValueError):
    """Base error for workbooks that cannot be turned into records."""


class SheetNotFoundError(WorkbookFormatError):
    """Raised when the expected worksheet is missing."""

    def __init__(self, sheet_name, path=None):
        self.sheet_name = sheet_name
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f'Worksheet "{sheet_name}" not found{where}')


class NoValidDataError(WorkbookFormatError):
    """Raised when no usable rows survive normalization."""
