import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from examdesk.modules.exams import ExamModule
from examdesk.modules.storage import MemoryRecordStore


@pytest.fixture
def exams(clock):
    return ExamModule(MemoryRecordStore("exams"), clock=clock)


@pytest.mark.asyncio
async def test_create_exam_defaults(exams, clock):
    exam = await exams.create_exam({"title": "Contracts"}, created_by="admin")

    assert exam["id"].startswith("exam-")
    assert exam["title"] == "Contracts"
    assert exam["subject"] == "General"
    assert exam["description"] == ""
    assert exam["durationMinutes"] == 60
    assert exam["questions"] == []
    assert exam["createdBy"] == "admin"
    assert exam["createdAt"] == exam["updatedAt"] == clock().isoformat()


@pytest.mark.asyncio
async def test_create_exam_keeps_extra_fields_and_explicit_id(exams):
    exam = await exams.create_exam({"id": "exam-bar-1", "title": "Torts", "passMark": 70})

    assert exam["id"] == "exam-bar-1"
    assert exam["passMark"] == 70
    assert await exams.get_exam("exam-bar-1") == exam


@pytest.mark.asyncio
async def test_create_exam_requires_title(exams):
    with pytest.raises(ValueError, match="title required"):
        await exams.create_exam({"subject": "Evidence"})


@pytest.mark.asyncio
async def test_update_exam(exams, clock):
    exam = await exams.create_exam({"title": "Torts"}, created_by="admin")
    clock.advance(minutes=1)

    updated = await exams.update_exam(exam["id"], {"title": "Torts II", "id": "hijack", "createdBy": "x"})

    assert updated["id"] == exam["id"]
    assert updated["title"] == "Torts II"
    assert updated["createdBy"] == "admin"
    assert updated["createdAt"] == exam["createdAt"]
    assert updated["updatedAt"] == clock().isoformat()
    assert await exams.get_exam("hijack") is None


@pytest.mark.asyncio
async def test_update_missing_exam(exams):
    assert await exams.update_exam("exam-missing", {"title": "x"}) is None


@pytest.mark.asyncio
async def test_delete_and_list(exams, clock):
    first = await exams.create_exam({"title": "A"})
    clock.advance(seconds=1)
    second = await exams.create_exam({"title": "B"})

    assert [e["id"] for e in await exams.list_exams()] == [first["id"], second["id"]]
    assert await exams.delete_exam(first["id"]) is True
    assert await exams.delete_exam(first["id"]) is False
    assert [e["id"] for e in await exams.list_exams()] == [second["id"]]


@pytest.mark.asyncio
async def test_stats(exams):
    await exams.create_exam({"title": "A"})

    assert await exams.stats(total_students=3) == {
        "totalExams": 1,
        "totalStudents": 3,
        "totalSubmissions": 0,
        "pendingReview": 0,
    }
