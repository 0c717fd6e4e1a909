from decimal import Decimal

import pytest

from student_management import models
from student_management.config import DEFAULT_DATABASE_URL, Settings


@pytest.mark.parametrize("name,email,phone", [
    ("Ada Lovelace", "ada@example.com", "555-0100"),
    ("Alan Turing", None, None),
    ("Grace Hopper", "grace@example.com", ""),
])
def test_new_student_has_zero_balance_and_active_status(name, email, phone):
    s = models.Student(name=name, email=email, phone=phone)
    assert s.balance == Decimal("0")
    assert s.enrollment_status == models.ACTIVE
    assert s.course is None


def test_student_str_includes_course_name():
    s = models.Student(name="Ada", email="ada@example.com")
    assert "course=None" in str(s)
    s.course = models.Course(course_name="Mathematics", duration="3 years")
    assert "course=Mathematics" in str(s)


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("ENV", raising=False)
    monkeypatch.delenv("DB_POOL_SIZE", raising=False)
    s = Settings()
    assert s.ENV == "dev"
    assert s.DATABASE_URL == DEFAULT_DATABASE_URL
    assert s.DB_POOL_SIZE == 5


def test_settings_rejects_default_database_outside_dev(monkeypatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError):
        Settings()
    monkeypatch.setenv("DATABASE_URL", "postgresql://app:secret@db:5432/students")
    assert Settings().ENV == "prod"


def test_settings_rejects_empty_pool(monkeypatch):
    monkeypatch.setenv("DB_POOL_SIZE", "0")
    with pytest.raises(RuntimeError):
        Settings()
