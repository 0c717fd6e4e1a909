"""FastAPI application entrypoint and HTTP controllers.

Controllers are intentionally thin: they accept requests, obtain the
services for the request's session, delegate, and return JSON responses.
Domain errors are translated to HTTP status codes by the exception
handlers registered below, so no route catches anything itself.

Endpoints implemented:
- GET /health
- POST /courses, GET /courses, GET/PUT/DELETE /courses/{id}
- POST /students, GET /students, GET/PUT/DELETE /students/{id}
- POST /students/{id}/enroll
- POST /students/{id}/payments, POST /students/{id}/refunds
- GET /students/{id}/payments
"""

from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, HTMLResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlmodel import Session
from typing import List
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from .container import Services, build_services
from .errors import ConstraintViolationError, NotFoundError, TransactionFailureError, ValidationError
from . import schemas
from .config import settings

app = FastAPI(title="Student Management API")
logger = logging.getLogger("student_management.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    info = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else "unknown",
    }
    try:
        response = await call_next(request)
    except Exception:
        info["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception("request_failed %s", json.dumps(info, ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    info["status_code"] = response.status_code
    info["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info("request_done %s", json.dumps(info, ensure_ascii=True))
    return response


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(404, exc)


@app.exception_handler(ConstraintViolationError)
async def constraint_handler(request: Request, exc: ConstraintViolationError):
    return _error(409, exc)


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return _error(400, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(TransactionFailureError)
async def transaction_failure_handler(request: Request, exc: TransactionFailureError):
    logger.error("transaction failed on %s: %s", request.url.path, exc)
    return _error(500, exc)


def get_services(db: Session = Depends(get_session)) -> Services:
    """FastAPI dependency building the services for the request session."""
    return build_services(db)


@app.get("/health")
def health(db: Session = Depends(get_session)):
    """Health check that also verifies the database answers."""
    db.connection().execute(text("SELECT 1"))
    return {"status": "ok"}


@app.get("/", response_class=HTMLResponse)
def home():
    """Minimal homepage for quick manual testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head><meta charset="UTF-8" /><title>Student Management API</title></head>
    <body>
      <h1>Student Management API</h1>
      <ul>
        <li><a href="/docs">Swagger UI</a></li>
        <li><a href="/students">Students</a></li>
        <li><a href="/courses">Courses</a></li>
      </ul>
    </body>
    </html>
    """


@app.post('/courses', response_model=schemas.CourseOut, status_code=201)
def add_course(payload: schemas.CourseIn, svc: Services = Depends(get_services)):
    course = svc.courses.add_course(payload.course_name, payload.duration)
    return schemas.CourseOut.model_validate(course)


@app.get('/courses', response_model=List[schemas.CourseOut])
def list_courses(svc: Services = Depends(get_services)):
    return [schemas.CourseOut.model_validate(c) for c in svc.courses.list_courses()]


@app.get('/courses/{course_id}', response_model=schemas.CourseOut)
def get_course(course_id: int, svc: Services = Depends(get_services)):
    return schemas.CourseOut.model_validate(svc.courses.get_course(course_id))


@app.put('/courses/{course_id}', response_model=schemas.CourseOut)
def update_course(course_id: int, payload: schemas.CourseUpdate, svc: Services = Depends(get_services)):
    course = svc.courses.update_course(course_id, payload.course_name, payload.duration)
    return schemas.CourseOut.model_validate(course)


@app.delete('/courses/{course_id}', status_code=204)
def delete_course(course_id: int, svc: Services = Depends(get_services)):
    svc.courses.delete_course(course_id)
    return Response(status_code=204)


@app.post('/students', response_model=schemas.StudentOut, status_code=201)
def add_student(payload: schemas.StudentIn, svc: Services = Depends(get_services)):
    """Register a student with a zero balance and ACTIVE status."""
    student = svc.students.add_student(payload.name, payload.email, payload.phone)
    return schemas.StudentOut.model_validate(student)


@app.get('/students', response_model=List[schemas.StudentOut])
def list_students(svc: Services = Depends(get_services)):
    return [schemas.StudentOut.model_validate(s) for s in svc.students.list_students()]


@app.get('/students/{student_id}', response_model=schemas.StudentOut)
def get_student(student_id: int, svc: Services = Depends(get_services)):
    return schemas.StudentOut.model_validate(svc.students.get_student(student_id))


@app.put('/students/{student_id}', response_model=schemas.StudentOut)
def update_student(student_id: int, payload: schemas.StudentUpdate, svc: Services = Depends(get_services)):
    """Update the fields present in the body; omitted fields are kept."""
    student = svc.students.update_student(
        student_id,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        enrollment_status=payload.enrollment_status,
    )
    return schemas.StudentOut.model_validate(student)


@app.delete('/students/{student_id}', status_code=204)
def delete_student(student_id: int, svc: Services = Depends(get_services)):
    svc.students.delete_student(student_id)
    return Response(status_code=204)


@app.post('/students/{student_id}/enroll', response_model=schemas.StudentOut)
def enroll_student(student_id: int, payload: schemas.EnrollIn, svc: Services = Depends(get_services)):
    """Enroll the student in `course_id`; unknown ids return 404."""
    student = svc.students.enroll_student(student_id, payload.course_id)
    return schemas.StudentOut.model_validate(student)


@app.post('/students/{student_id}/payments', response_model=schemas.PaymentOut, status_code=201)
def process_payment(student_id: int, payload: schemas.AmountIn, svc: Services = Depends(get_services)):
    """Credit the student's balance and record the payment."""
    payment = svc.fees.process_payment(student_id, payload.amount)
    return schemas.PaymentOut.model_validate(payment)


@app.post('/students/{student_id}/refunds', response_model=schemas.PaymentOut, status_code=201)
def process_refund(student_id: int, payload: schemas.AmountIn, svc: Services = Depends(get_services)):
    """Debit the student's balance and record the refund.

    Refunds larger than the current balance are rejected with 400.
    """
    payment = svc.fees.process_refund(student_id, payload.amount)
    return schemas.PaymentOut.model_validate(payment)


@app.get('/students/{student_id}/payments', response_model=List[schemas.PaymentOut])
def payment_history(student_id: int, svc: Services = Depends(get_services)):
    return [schemas.PaymentOut.model_validate(p) for p in svc.fees.payment_history(student_id)]
