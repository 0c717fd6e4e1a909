"""CLI script to create the tables and seed courses into the backend DB.
Usage: python scripts/seed_courses.py [--file COURSES.json]

The JSON file must contain a list of `{"course_name": ..., "duration": ...}`
objects. Without `--file` a small default catalogue is inserted.
"""
import sys
import json
import argparse
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `student_management` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from student_management.container import build_services
from student_management.database import engine, create_db_and_tables
from student_management.errors import StudentManagementError

DEFAULT_COURSES = [
    {"course_name": "Computer Science", "duration": "4 years"},
    {"course_name": "Data Analytics", "duration": "6 months"},
    {"course_name": "Web Development", "duration": "12 weeks"},
]


def load_courses(path: Optional[pathlib.Path]) -> list:
    """Return course dicts from `path`, or the default catalogue."""
    if path is None:
        return DEFAULT_COURSES
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of courses")
    return data


def main(path: Optional[pathlib.Path] = None) -> int:
    """Create tables and insert every course whose name is not present yet.

    Returns the number of courses created. Results are printed to stdout
    for a quick CLI feedback loop.
    """
    create_db_and_tables()
    created = 0
    with Session(engine, expire_on_commit=False) as session:
        svc = build_services(session)
        existing = {c.course_name for c in svc.courses.list_courses()}
        for item in load_courses(path):
            if not isinstance(item, dict):
                print(f"Skipping malformed entry: {item!r}")
                continue
            name = item.get("course_name")
            if isinstance(name, str):
                name = name.strip()
            if name in existing:
                print(f"Skipping existing course: {name}")
                continue
            try:
                course = svc.courses.add_course(name, item.get("duration"))
            except StudentManagementError as e:
                print(f"Error adding course {item!r}: {e}")
                continue
            existing.add(course.course_name)
            created += 1
            print(f"Created course {course.course_id}: {course.course_name}")
    print(f"Total created courses: {created}")
    return created


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--file', type=pathlib.Path, help='JSON file with a list of courses')
    args = parser.parse_args()
    main(path=args.file)
