"""Exception types raised by repositories and services.

Controllers map these onto HTTP status codes; scripts print them. Nothing
in the data-access or service layers catches them on the way up.
"""


class StudentManagementError(Exception):
    """Base class for every domain error raised by this package."""


class NotFoundError(StudentManagementError, LookupError):
    """A referenced entity id does not exist in the store."""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ConstraintViolationError(StudentManagementError):
    """A uniqueness or foreign-key constraint rejected the write."""


class ValidationError(StudentManagementError, ValueError):
    """A required field is missing or a value is malformed."""


class TransactionFailureError(StudentManagementError):
    """The store failed part-way through a unit of work; it was rolled back."""
