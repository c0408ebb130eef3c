"""Domain errors raised by the service layer and translated to HTTP responses in main.py."""
from typing import Dict


class NotFoundError(Exception):
    """Raised when a user, book, review or collection entry does not exist."""

    def __init__(self, resource: str, resource_id=None):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class ForbiddenError(Exception):
    """Raised when the acting user does not own the resource being mutated."""
    pass


class ValidationFailed(Exception):
    """Raised with a field -> message map when input is rejected before persistence."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
