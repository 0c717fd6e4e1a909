"""Business logic services used by HTTP controllers and scripts.

This module holds small service classes that coordinate repositories.
Services are intentionally thin: they validate input, execute domain
logic and persist entities via the repositories they were constructed
with. Every public method runs as a single unit of work through
`database.transaction`, so a failure at any step leaves the store as it
was before the call.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from sqlmodel import Session
from . import models, repositories
from .database import transaction
from .errors import ConstraintViolationError, NotFoundError, ValidationError

logger = logging.getLogger("student_management.services")

CENTS = Decimal("0.01")
MAX_BALANCE = Decimal("99999999.99")


def _require_text(value, field: str, max_length: int) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return value


def _optional_text(value, field: str, max_length: int) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _require_text(value, field, max_length)


def _validate_email(email) -> Optional[str]:
    email = _optional_text(email, "email", 100)
    if email is None:
        return None
    local, _, domain = email.partition("@")
    host, dot, tld = domain.rpartition(".")
    if not local or "@" in domain or not dot or not host or not tld or " " in email:
        raise ValidationError(f"malformed email: {email}")
    return email.lower()


def _validate_amount(amount) -> Decimal:
    """Coerce `amount` to a positive Decimal with at most two places."""
    if isinstance(amount, bool):
        raise ValidationError("amount must be a number")
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"amount must be a number: {amount!r}")
    if not value.is_finite() or value <= 0:
        raise ValidationError("amount must be greater than zero")
    if value.as_tuple().exponent < -2:
        raise ValidationError("amount may have at most two decimal places")
    if value > MAX_BALANCE:
        raise ValidationError(f"amount exceeds {MAX_BALANCE}")
    return value.quantize(CENTS)


class CourseService:
    """Create, read, update and delete courses."""
    def __init__(self, session: Session, courses: repositories.CourseRepository):
        self.session = session
        self.courses = courses

    def add_course(self, course_name: str, duration: Optional[str] = None) -> models.Course:
        course = models.Course(
            course_name=_require_text(course_name, "course_name", 100),
            duration=_optional_text(duration, "duration", 50),
        )
        with transaction(self.session):
            self.courses.save(course)
        logger.info("Created course id=%s name=%s", course.course_id, course.course_name)
        return course

    def get_course(self, course_id: int) -> models.Course:
        with transaction(self.session):
            course = self.courses.find_by_id(course_id)
            if course is None:
                raise NotFoundError("course", course_id)
        return course

    def list_courses(self) -> List[models.Course]:
        with transaction(self.session):
            return self.courses.find_all()

    def update_course(self, course_id: int, course_name: Optional[str] = None, duration: Optional[str] = None) -> models.Course:
        """Change the supplied fields of a course; `None` leaves a field as is."""
        with transaction(self.session):
            course = self.courses.find_by_id(course_id)
            if course is None:
                raise NotFoundError("course", course_id)
            if course_name is not None:
                course.course_name = _require_text(course_name, "course_name", 100)
            if duration is not None:
                course.duration = _optional_text(duration, "duration", 50)
            course = self.courses.update(course)
        return course

    def delete_course(self, course_id: int) -> None:
        """Delete a course. Courses that still have students cannot be deleted."""
        with transaction(self.session):
            self.courses.delete(course_id)
        logger.info("Deleted course id=%s", course_id)


class StudentService:
    """Student registration, maintenance and course enrollment."""
    def __init__(self, session: Session, students: repositories.StudentRepository,
                 courses: repositories.CourseRepository):
        self.session = session
        self.students = students
        self.courses = courses

    def add_student(self, name: str, email: Optional[str] = None, phone: Optional[str] = None) -> models.Student:
        """Register a new student with a zero balance and ACTIVE status.

        Raises `ValidationError` for missing or oversized fields and
        `ConstraintViolationError` if the email is already registered.
        """
        student = models.Student(
            name=_require_text(name, "name", 100),
            email=_validate_email(email),
            phone=_optional_text(phone, "phone", 15),
        )
        with transaction(self.session):
            if student.email and self.students.find_by_email(student.email) is not None:
                raise ConstraintViolationError(f"email already registered: {student.email}")
            self.students.save(student)
        logger.info("Created student id=%s", student.student_id)
        return student

    def get_student(self, student_id: int) -> models.Student:
        with transaction(self.session):
            student = self.students.find_by_id(student_id)
            if student is None:
                raise NotFoundError("student", student_id)
        return student

    def list_students(self) -> List[models.Student]:
        with transaction(self.session):
            return self.students.find_all()

    def update_student(self, student_id: int, name: Optional[str] = None, email: Optional[str] = None,
                       phone: Optional[str] = None, enrollment_status: Optional[str] = None) -> models.Student:
        """Change the supplied fields of a student; `None` leaves a field as is.

        `enrollment_status` is an open flag: any short non-empty value is
        accepted and stored upper-cased.
        """
        with transaction(self.session):
            student = self.students.find_by_id(student_id)
            if student is None:
                raise NotFoundError("student", student_id)
            if name is not None:
                student.name = _require_text(name, "name", 100)
            if email is not None:
                new_email = _validate_email(email)
                if new_email and new_email != student.email:
                    other = self.students.find_by_email(new_email)
                    if other is not None and other.student_id != student.student_id:
                        raise ConstraintViolationError(f"email already registered: {new_email}")
                student.email = new_email
            if phone is not None:
                student.phone = _optional_text(phone, "phone", 15)
            if enrollment_status is not None:
                student.enrollment_status = _require_text(enrollment_status, "enrollment_status", 20).upper()
            student = self.students.update(student)
        return student

    def delete_student(self, student_id: int) -> None:
        """Delete a student. Students with recorded payments cannot be deleted."""
        with transaction(self.session):
            self.students.delete(student_id)
        logger.info("Deleted student id=%s", student_id)

    def enroll_student(self, student_id: int, course_id: int) -> models.Student:
        """Assign `course_id` to the student.

        Both ids are resolved before anything changes, so an unknown
        student or course raises `NotFoundError` and leaves the student's
        current course untouched.
        """
        with transaction(self.session):
            student = self.students.find_by_id(student_id)
            if student is None:
                raise NotFoundError("student", student_id)
            course = self.courses.find_by_id(course_id)
            if course is None:
                raise NotFoundError("course", course_id)
            student.course = course
            student = self.students.update(student)
        logger.info("Enrolled student id=%s in course id=%s", student_id, course_id)
        return student


class FeeService:
    """Apply payments and refunds to student balances."""
    def __init__(self, session: Session, students: repositories.StudentRepository,
                 payments: repositories.PaymentRepository):
        self.session = session
        self.students = students
        self.payments = payments

    def process_payment(self, student_id: int, amount) -> models.Payment:
        """Credit `amount` to the student and record a `payment` entry."""
        return self._apply(student_id, _validate_amount(amount), models.PAYMENT)

    def process_refund(self, student_id: int, amount) -> models.Payment:
        """Debit `amount` from the student and record a `refund` entry.

        A refund larger than the current balance is rejected with
        `ValidationError`; balances never go negative.
        """
        return self._apply(student_id, _validate_amount(amount), models.REFUND)

    def payment_history(self, student_id: int) -> List[models.Payment]:
        with transaction(self.session):
            if self.students.find_by_id(student_id) is None:
                raise NotFoundError("student", student_id)
            return self.payments.find_by_student(student_id)

    def _apply(self, student_id: int, amount: Decimal, payment_type: str) -> models.Payment:
        # balance update and payment row commit together or not at all
        with transaction(self.session):
            student = self.students.find_by_id(student_id)
            if student is None:
                raise NotFoundError("student", student_id)
            current = Decimal(student.balance or 0)
            if payment_type == models.REFUND:
                new_balance = current - amount
                if new_balance < 0:
                    raise ValidationError(
                        f"refund of {amount} exceeds balance {current} for student {student_id}"
                    )
            else:
                new_balance = current + amount
                if new_balance > MAX_BALANCE:
                    raise ValidationError(f"balance would exceed {MAX_BALANCE}")
            student.balance = new_balance.quantize(CENTS)
            self.students.update(student)
            payment = self.payments.save(
                models.Payment(student_id=student.student_id, amount=amount, payment_type=payment_type)
            )
        logger.info(
            "Recorded %s id=%s student=%s amount=%s balance=%s",
            payment_type, payment.payment_id, student_id, amount, student.balance,
        )
        return payment
