"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable. Field-level rules that the
services also enforce (lengths, positive amounts) are repeated here so
malformed requests are rejected before a session is touched.
"""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CourseIn(BaseModel):
    """Payload for creating a course."""
    course_name: str = Field(min_length=1, max_length=100)
    duration: Optional[str] = Field(default=None, max_length=50)


class CourseUpdate(BaseModel):
    """Partial course update; omitted fields are left unchanged."""
    course_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    duration: Optional[str] = Field(default=None, max_length=50)


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: int
    course_name: str
    duration: Optional[str] = None


class StudentIn(BaseModel):
    """Payload for registering a student."""
    name: str = Field(min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=15)


class StudentUpdate(BaseModel):
    """Partial student update; omitted fields are left unchanged."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=15)
    enrollment_status: Optional[str] = Field(default=None, min_length=1, max_length=20)


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    balance: Decimal
    enrollment_status: str
    course: Optional[CourseOut] = None


class EnrollIn(BaseModel):
    """Request body for enrolling a student in a course."""
    course_id: int


class AmountIn(BaseModel):
    """Request body for payments and refunds."""
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: int
    student_id: int
    amount: Decimal
    payment_date: Optional[datetime] = None
    payment_type: str
