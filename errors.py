"""
Ledger error kinds

Each error aborts the whole call. `status_code` is the HTTP status the API
layer answers with.
"""


class LedgerError(Exception):
    status_code = 400
    message = "Ledger error"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class AlreadyInitialized(LedgerError):
    status_code = 409
    message = "Ledger already initialized"


class LedgerNotInitialized(LedgerError):
    status_code = 500
    message = "Ledger not initialized"


class DuplicateIdentifier(LedgerError):
    status_code = 409
    message = "Meme ID already exists"


class InvalidRoyalty(LedgerError):
    status_code = 422
    message = "Royalty must be between 0 and 100"


class RecordNotFound(LedgerError):
    status_code = 404
    message = "Meme not found"


class AlreadyLiked(LedgerError):
    status_code = 409
    message = "User already liked this meme"


class NotLiked(LedgerError):
    status_code = 409
    message = "User has not liked this meme"


class NoLikeHistory(LedgerError):
    status_code = 404
    message = "No likes found for meme"


class EmptyComment(LedgerError):
    status_code = 422
    message = "Comment text cannot be empty"


class CommentTooLong(LedgerError):
    status_code = 422
    message = "Comment text too long (max 500 characters)"


class InvalidTimestamp(LedgerError):
    status_code = 422
    message = "Timestamp out of range"
