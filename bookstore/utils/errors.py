# bookstore/utils/errors.py
from typing import List, Optional


class BookstoreError(Exception):
    """Business-rule failure raised by the service layer.

    Each subclass carries the HTTP status it maps to; the handler registered
    in ``bookstore.main`` turns it into a JSON response.
    """

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookstoreError):
    status_code = 404


class ConflictError(BookstoreError):
    status_code = 409


class ValidationFailed(BookstoreError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.errors = errors or []


class UnauthorizedError(BookstoreError):
    status_code = 401


class ForbiddenError(BookstoreError):
    status_code = 403
