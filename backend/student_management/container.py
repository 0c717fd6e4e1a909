"""Composition point for repositories and services.

Services never build their own repositories; `build_services` constructs
one repository per entity for a session and hands them to the service
constructors. The API calls it once per request, scripts once per run.
"""

from dataclasses import dataclass
from sqlmodel import Session
from . import repositories, services


@dataclass
class Services:
    students: services.StudentService
    courses: services.CourseService
    fees: services.FeeService


def build_services(session: Session) -> Services:
    """Wire the repositories for `session` into the three services."""
    student_repo = repositories.StudentRepository(session)
    course_repo = repositories.CourseRepository(session)
    payment_repo = repositories.PaymentRepository(session)
    return Services(
        students=services.StudentService(session, student_repo, course_repo),
        courses=services.CourseService(session, course_repo),
        fees=services.FeeService(session, student_repo, payment_repo),
    )
