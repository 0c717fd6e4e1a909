"""Repository classes encapsulating database operations.

Each repository is small and focused on a single entity (courses,
students, payments) and shares the `Session` it was built with.
Repositories flush so that identities are assigned and constraint
violations surface immediately, but they never commit: the service layer
owns the unit of work (see `database.transaction`).
"""

from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from sqlmodel import Session, select
from . import models
from .errors import ConstraintViolationError, NotFoundError

# ids outside SQLite's signed 64-bit INTEGER can never match a row
MAX_ID = 2 ** 63 - 1


def _storable_id(entity_id) -> bool:
    return isinstance(entity_id, int) and 0 < entity_id <= MAX_ID


class _CrudRepository:
    """save/find/update/delete shared by the per-entity repositories."""
    model = None
    id_attr = None
    entity_name = None

    def __init__(self, session: Session):
        self.session = session

    def _flush(self):
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise ConstraintViolationError(f"{self.entity_name} violates a constraint: {exc.orig}") from exc

    def _select(self):
        return select(self.model)

    def save(self, entity):
        """Insert a new record and return it with its store-assigned id."""
        self.session.add(entity)
        self._flush()
        return entity

    def find_by_id(self, entity_id: int):
        """Return the entity with `entity_id` or `None` if not found."""
        if not _storable_id(entity_id):
            return None
        stmt = self._select().where(getattr(self.model, self.id_attr) == entity_id)
        return self.session.exec(stmt).first()

    def find_all(self) -> List:
        """Return every record ordered by id."""
        stmt = self._select().order_by(getattr(self.model, self.id_attr))
        return list(self.session.exec(stmt).all())

    def update(self, entity):
        """Overwrite the stored record matching the entity's id.

        Raises `NotFoundError` when the entity has no id or the id does not
        exist; the managed instance is returned.
        """
        entity_id = getattr(entity, self.id_attr)
        if not _storable_id(entity_id) or self.session.get(self.model, entity_id) is None:
            raise NotFoundError(self.entity_name, entity_id)
        merged = self.session.merge(entity)
        self._flush()
        return merged

    def delete(self, entity_id: int) -> None:
        """Remove the record; unknown ids raise `NotFoundError`."""
        if not _storable_id(entity_id):
            raise NotFoundError(self.entity_name, entity_id)
        entity = self.session.get(self.model, entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        self.session.delete(entity)
        self._flush()


class CourseRepository(_CrudRepository):
    """CRUD operations for `Course` objects."""
    model = models.Course
    id_attr = "course_id"
    entity_name = "course"


class StudentRepository(_CrudRepository):
    """CRUD operations for `Student` objects.

    Reads join the student's course in the same query so callers always
    get the association populated.
    """
    model = models.Student
    id_attr = "student_id"
    entity_name = "student"

    def _select(self):
        return select(models.Student).options(joinedload(models.Student.course))

    def find_by_email(self, email: str) -> Optional[models.Student]:
        """Return the student registered with `email` or `None`."""
        stmt = self._select().where(models.Student.email == email)
        return self.session.exec(stmt).first()


class PaymentRepository(_CrudRepository):
    """Persist and query `Payment` records."""
    model = models.Payment
    id_attr = "payment_id"
    entity_name = "payment"

    def find_by_student(self, student_id: int) -> List[models.Payment]:
        """List payments for `student_id`, oldest first."""
        if not _storable_id(student_id):
            return []
        stmt = (
            select(models.Payment)
            .where(models.Payment.student_id == student_id)
            .order_by(models.Payment.payment_date, models.Payment.payment_id)
        )
        return list(self.session.exec(stmt).all())
