"""
Domain Errors
=============

Raised by the operations layer and translated to HTTP responses by the web
layer. Each error carries the status code it maps to.
"""


class DirectoryError(Exception):
    """Base exception for business directory errors."""
    status_code = 500


class InvalidInputError(DirectoryError):
    """The client sent something we refuse to store."""
    status_code = 400


class BusinessNotFoundError(DirectoryError):
    status_code = 404


class StorageError(DirectoryError):
    """
    The repository reported a database error.

    The message is safe to show to clients; the underlying cause is kept on
    ``cause`` for server-side logging only.
    """
    status_code = 500

    def __init__(self, cause: Exception):
        super().__init__("Database error")
        self.cause = cause
