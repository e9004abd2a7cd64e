"""
Course repository: maps Course operations onto SQL statements.

Every mutation runs in exactly one transaction on the injected Session and commits once.
Update and delete lock the target row (SELECT ... FOR UPDATE where the dialect supports it)
so the existence check and the write see the same row.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models
from core.errors import CourseNotFound, CourseValidationError, RenumberingError, StorageError
from schemas.course import Course, CourseIn, SequenceReset

logger = logging.getLogger("repository")

MUTABLE_FIELDS = {"title", "description", "long_description", "duration", "price", "level", "image_url"}

# Live ids are positive and fit the INTEGER column; anything else cannot name a stored row.
MAX_COURSE_ID = 2**31 - 1


class CourseRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_courses(self) -> List[Course]:
        try:
            rows = self.db.query(models.Course).order_by(models.Course.id.asc()).all()
        except SQLAlchemyError as e:
            raise self._storage_failure("list_courses", e) from e
        return [Course.model_validate(row) for row in rows]

    def get_course(self, course_id: int) -> Course:
        self._check_id(course_id)
        try:
            row = self.db.get(models.Course, course_id)
        except SQLAlchemyError as e:
            raise self._storage_failure("get_course", e, course_id) from e
        if row is None:
            raise CourseNotFound(course_id)
        return Course.model_validate(row)

    def create_course(self, fields: CourseIn) -> Course:
        values = self._validated_values(fields)
        row = models.Course(**values)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            raise self._storage_failure("create_course", e) from e
        return Course.model_validate(row)

    def update_course(self, course_id: int, fields: CourseIn) -> Course:
        values = self._validated_values(fields)
        self._check_id(course_id)
        try:
            row = self._lock_row(course_id)
            if row is None:
                self.db.rollback()
                raise CourseNotFound(course_id)
            for key, value in values.items():
                setattr(row, key, value)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            raise self._storage_failure("update_course", e, course_id) from e
        return Course.model_validate(row)

    def delete_course(self, course_id: int) -> Course:
        """Remove a course and return it as it was just before deletion."""
        self._check_id(course_id)
        try:
            row = self._lock_row(course_id)
            if row is None:
                self.db.rollback()
                raise CourseNotFound(course_id)
            snapshot = Course.model_validate(row)
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_failure("delete_course", e, course_id) from e
        return snapshot

    def reset_sequence(self) -> SequenceReset:
        """Compact ids to 1..N in creation order and restart the counter at N+1.

        The whole pass is a single transaction holding an exclusive table lock, and the
        primary key stays in force throughout: rows that need a new id are first parked
        at their negated id, which cannot collide with any live positive id, and then
        moved to their final slot. Any failure rolls everything back.
        """
        dialect = self.db.get_bind().dialect.name
        try:
            self._lock_table(dialect)
            ordered = [
                row_id
                for (row_id,) in self.db.query(models.Course.id).order_by(
                    models.Course.created_at.asc(), models.Course.id.asc()
                )
            ]
            total = len(ordered)
            moves = [(old_id, new_id) for new_id, old_id in enumerate(ordered, start=1) if old_id != new_id]
            if moves:
                parked = [old_id for old_id, _ in moves]
                self.db.execute(
                    update(models.Course)
                    .where(models.Course.id.in_(parked))
                    .values(id=-models.Course.id)
                    .execution_options(synchronize_session=False)
                )
                for old_id, new_id in moves:
                    self.db.execute(
                        update(models.Course)
                        .where(models.Course.id == -old_id)
                        .values(id=new_id)
                        .execution_options(synchronize_session=False)
                    )
            self._restart_counter(dialect, total + 1)
            self.db.commit()
        except (SQLAlchemyError, StorageError) as e:
            self.db.rollback()
            logger.error("reset_sequence_rolled_back", extra={"error": str(e), "error_type": type(e).__name__})
            raise RenumberingError("Failed to reset course id sequence", detail=str(e)) from e

        # Identity map entries still carry the old primary keys
        self.db.expunge_all()
        logger.info("reset_sequence_completed", extra={"total_courses": total, "next_id": total + 1, "count": len(moves)})
        return SequenceReset(total_courses=total, next_id=total + 1)

    def _lock_row(self, course_id: int) -> Optional[models.Course]:
        return (
            self.db.query(models.Course)
            .filter(models.Course.id == course_id)
            .with_for_update()
            .first()
        )

    def _lock_table(self, dialect: str) -> None:
        if dialect == "postgresql":
            self.db.execute(text(f"LOCK TABLE {models.Course.__tablename__} IN EXCLUSIVE MODE"))
        # SQLite serializes writers at the database level already.

    def _restart_counter(self, dialect: str, next_id: int) -> None:
        table = models.Course.__tablename__
        if dialect == "postgresql":
            self.db.execute(
                text("SELECT setval(pg_get_serial_sequence(:table, 'id'), :next_id, false)"),
                {"table": table, "next_id": next_id},
            )
        elif dialect == "sqlite":
            self.db.execute(text("DELETE FROM sqlite_sequence WHERE name = :table"), {"table": table})
            if next_id > 1:
                self.db.execute(
                    text("INSERT INTO sqlite_sequence (name, seq) VALUES (:table, :seq)"),
                    {"table": table, "seq": next_id - 1},
                )
        else:
            raise StorageError(f"Sequence reset is not supported on {dialect}")

    @staticmethod
    def _check_id(course_id: int) -> None:
        if not 0 < course_id <= MAX_COURSE_ID:
            raise CourseNotFound(course_id)

    @staticmethod
    def _validated_values(fields: CourseIn) -> Dict[str, Any]:
        title = (fields.title or "").strip()
        if not title:
            raise CourseValidationError("title", "Title is required", received=fields.title)
        values = fields.model_dump(include=MUTABLE_FIELDS)
        values["title"] = title
        return values

    def _storage_failure(self, operation: str, exc: SQLAlchemyError, course_id: Optional[int] = None) -> StorageError:
        self.db.rollback()
        extra: Dict[str, Any] = {"error": str(exc), "error_type": type(exc).__name__}
        if course_id is not None:
            extra["course_id"] = course_id
        logger.error(f"{operation}_storage_failed", extra=extra)
        return StorageError("Database query failed", detail=str(exc))
