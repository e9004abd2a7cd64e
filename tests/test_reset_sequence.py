from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

import models
from core.errors import RenumberingError
from repository import CourseRepository
from schemas.course import CourseIn


def _ids_and_titles(repo):
    return [(c.id, c.title) for c in repo.list_courses()]


def test_gaps_are_compacted_and_next_id_continues(repo):
    created = [repo.create_course(CourseIn(title=f"Course {i}")) for i in range(1, 10)]
    for course in created:
        if course.id not in (3, 7, 9):
            repo.delete_course(course.id)
    before = {c.title: c for c in repo.list_courses()}

    result = repo.reset_sequence()

    assert result.total_courses == 3
    assert result.next_id == 4
    assert _ids_and_titles(repo) == [(1, "Course 3"), (2, "Course 7"), (3, "Course 9")]
    # Only ids move; every other field stays as it was
    for course in repo.list_courses():
        original = before[course.title]
        assert course.model_dump(exclude={"id"}) == original.model_dump(exclude={"id"})

    assert repo.create_course(CourseIn(title="Fresh")).id == 4


def test_ordering_follows_created_at_not_current_id(repo, db):
    start = datetime(2024, 1, 1, 9, 0, 0)
    db.add_all([
        models.Course(id=9, title="oldest", created_at=start),
        models.Course(id=3, title="middle", created_at=start + timedelta(hours=1)),
        models.Course(id=5, title="newest", created_at=start + timedelta(hours=2)),
    ])
    db.commit()

    repo.reset_sequence()

    assert _ids_and_titles(repo) == [(1, "oldest"), (2, "middle"), (3, "newest")]


def test_empty_table_resets_counter_to_one(repo):
    course = repo.create_course(CourseIn(title="Temporary"))
    repo.delete_course(course.id)

    result = repo.reset_sequence()

    assert result.total_courses == 0
    assert result.next_id == 1
    assert repo.create_course(CourseIn(title="First again")).id == 1


def test_already_contiguous_table_is_left_alone(repo):
    for i in range(3):
        repo.create_course(CourseIn(title=f"Course {i}"))
    before = repo.list_courses()

    result = repo.reset_sequence()

    assert result.next_id == 4
    assert repo.list_courses() == before


def test_failure_rolls_back_every_renumbered_row(repo, monkeypatch):
    created = [repo.create_course(CourseIn(title=f"Course {i}")) for i in range(1, 5)]
    repo.delete_course(created[0].id)
    repo.delete_course(created[2].id)
    before = _ids_and_titles(repo)

    def boom(self, dialect, next_id):
        raise OperationalError("SELECT setval", {}, Exception("sequence is locked"))

    monkeypatch.setattr(CourseRepository, "_restart_counter", boom)

    with pytest.raises(RenumberingError) as excinfo:
        repo.reset_sequence()

    assert "sequence is locked" in excinfo.value.detail
    assert _ids_and_titles(repo) == before == [(2, "Course 2"), (4, "Course 4")]
