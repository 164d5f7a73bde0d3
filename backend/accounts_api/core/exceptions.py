"""
Application Errors

Services raise these; the handlers registered in main.py turn them into
``{"success": false, "message": ...}`` responses with the matching status.
"""


class AppError(Exception):
    """Base class for errors that map onto an HTTP response"""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class OverapplicationError(AppError):
    status_code = 400
    default_message = "Amount exceeds the remaining balance"


class ImbalancedEntryError(AppError):
    status_code = 400
    default_message = "Total debits must equal total credits"


class JournalStateError(AppError):
    status_code = 400
    default_message = "Invalid journal entry state"


class PostedEntryImmutableError(JournalStateError):
    default_message = "Posted journal entries cannot be modified"


class AlreadyPostedError(JournalStateError):
    default_message = "Journal entry is already posted"


class VoidEntryError(JournalStateError):
    default_message = "Journal entry is void"


class DependencyExistsError(AppError):
    status_code = 400
    default_message = "Record has dependent records"


class InternalError(AppError):
    status_code = 500
