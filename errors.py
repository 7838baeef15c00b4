class StoreError(Exception):
    """Base error for the storefront API. Carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    status_code = 400


class NotFoundError(StoreError):
    status_code = 404


class RepositoryError(StoreError):
    status_code = 500
