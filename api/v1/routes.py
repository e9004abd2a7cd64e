"""
Course CRUD routes.

Design choices:
- The router does not hardcode a prefix; main.py mounts it using settings.api_prefix.
- Handlers are plain `def` functions: the repository talks to the database synchronously,
  so FastAPI runs them on its worker threads, each borrowing a pooled connection.
- Domain errors propagate untouched; main.py turns them into the JSON error envelope.
- Mutations return the ApiResponse envelope; reads return bare courses.
"""
from __future__ import annotations

import logging
from typing import List
from uuid import uuid4

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.logging_config import get_request_id, set_request_id
from database import get_db
from repository import CourseRepository
from schemas.api import ApiResponse, ErrorResponse
from schemas.course import Course, CourseIn, SequenceReset

# mounted under settings.api_prefix by main.py
router = APIRouter(
    tags=["courses"],
    responses={status: {"model": ErrorResponse} for status in (400, 404, 500)},
)
logger = logging.getLogger("api")


def get_repository(db: Session = Depends(get_db)) -> CourseRepository:
    return CourseRepository(db)


def _request_id() -> str:
    req_id = get_request_id()
    if not req_id:
        req_id = str(uuid4())
        set_request_id(req_id)
    return req_id


@router.get("/courses", response_model=List[Course])
def list_courses(repo: CourseRepository = Depends(get_repository)) -> List[Course]:
    """Return every course ordered by id."""
    courses = repo.list_courses()
    logger.info("list_courses_completed", extra={"count": len(courses)})
    return courses


# Registered before the /courses/{course_id} routes so the literal path wins.
@router.post("/courses/reset-sequence", response_model=ApiResponse[SequenceReset])
def reset_sequence(repo: CourseRepository = Depends(get_repository)) -> ApiResponse[SequenceReset]:
    """Renumber course ids to 1..N by creation time and restart the id counter at N+1."""
    req_id = _request_id()
    result = repo.reset_sequence()
    logger.info("reset_sequence_request_completed", extra={
        "total_courses": result.total_courses,
        "next_id": result.next_id,
    })
    return ApiResponse[SequenceReset](
        request_id=req_id,
        message="Course id sequence reset successfully",
        data=result,
    )


@router.get("/courses/{course_id}", response_model=Course)
def get_course(course_id: int, repo: CourseRepository = Depends(get_repository)) -> Course:
    return repo.get_course(course_id)


@router.post("/courses", response_model=ApiResponse[Course], status_code=201)
def create_course(payload: CourseIn, repo: CourseRepository = Depends(get_repository)) -> ApiResponse[Course]:
    req_id = _request_id()
    course = repo.create_course(payload)
    logger.info("create_course_completed", extra={"course_id": course.id})
    return ApiResponse[Course](request_id=req_id, message="Course added successfully", data=course)


@router.put("/courses/{course_id}", response_model=ApiResponse[Course])
def update_course(
    course_id: int,
    payload: CourseIn,
    repo: CourseRepository = Depends(get_repository),
) -> ApiResponse[Course]:
    """Overwrite every mutable field of a course."""
    req_id = _request_id()
    course = repo.update_course(course_id, payload)
    logger.info("update_course_completed", extra={"course_id": course_id})
    return ApiResponse[Course](request_id=req_id, message="Course updated successfully", data=course)


@router.delete("/courses/{course_id}", response_model=ApiResponse[Course])
def delete_course(course_id: int, repo: CourseRepository = Depends(get_repository)) -> ApiResponse[Course]:
    req_id = _request_id()
    course = repo.delete_course(course_id)
    logger.info("delete_course_completed", extra={"course_id": course_id})
    return ApiResponse[Course](request_id=req_id, message="Course deleted successfully", data=course)
