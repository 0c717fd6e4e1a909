"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Each class maps to a table; the Student -> Course and Payment -> Student
associations are plain many-to-one relationships whose loading strategy
is chosen by the repositories at query time.
"""

from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, timezone
from decimal import Decimal

ACTIVE = "ACTIVE"
INACTIVE = "INACTIVE"

PAYMENT = "payment"
REFUND = "refund"


class Course(SQLModel, table=True):
    """A course students can be enrolled in.

    `duration` is free text such as "6 months".
    """
    __tablename__ = "courses"

    course_id: Optional[int] = Field(default=None, primary_key=True)
    course_name: str = Field(max_length=100, nullable=False)
    duration: Optional[str] = Field(default=None, max_length=50)


class Student(SQLModel, table=True):
    """A student record.

    Fields:
    - `email`: unique when present
    - `balance`: running total of payments minus refunds, DECIMAL(10,2)
    - `enrollment_status`: open string flag, `ACTIVE` on creation
    - `course`: optional non-owning reference; deleting a student never
      touches the course
    """
    __tablename__ = "students"

    student_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, nullable=False)
    email: Optional[str] = Field(default=None, max_length=100, unique=True)
    phone: Optional[str] = Field(default=None, max_length=15)
    course_id: Optional[int] = Field(default=None, foreign_key="courses.course_id")
    balance: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    enrollment_status: str = Field(default=ACTIVE, max_length=20)
    course: Optional[Course] = Relationship()

    def __str__(self):
        course_name = self.course.course_name if self.course is not None else "None"
        return (
            f"Student(id={self.student_id}, name={self.name!r}, email={self.email!r}, "
            f"phone={self.phone!r}, course={course_name}, balance={self.balance}, "
            f"status={self.enrollment_status})"
        )


class Payment(SQLModel, table=True):
    """A single payment or refund applied to a student's balance."""
    __tablename__ = "payments"

    payment_id: Optional[int] = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="students.student_id", nullable=False, index=True)
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    payment_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    payment_type: str = Field(max_length=20)
    student: Optional[Student] = Relationship()
