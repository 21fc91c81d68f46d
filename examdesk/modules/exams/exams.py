"""
Exam records.

Exams are schemaless JSON documents in the "exams" record store namespace.
Only id, title and the bookkeeping fields have meaning here; everything else
the dashboard sends is stored as given.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any, Callable, Dict, List, Optional

from ..storage import RecordStore

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = ("id", "createdAt", "createdBy")


class ExamModule:
    """CRUD and dashboard counters for exams."""

    def __init__(
        self,
        records: RecordStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize exam module.

        Args:
            records: Record store for the "exams" namespace
            clock: Returns the current aware datetime (defaults to UTC wall clock)
        """
        self.records = records
        self._clock = clock or (lambda: datetime.now(UTC))

    async def list_exams(self) -> List[Dict[str, Any]]:
        exams = await self.records.all()
        return sorted(exams, key=lambda e: e.get("createdAt", ""))

    async def get_exam(self, exam_id: str) -> Optional[Dict[str, Any]]:
        return await self.records.get(exam_id)

    async def create_exam(self, fields: Dict[str, Any], created_by: Optional[str] = None) -> Dict[str, Any]:
        """
        Create an exam record.

        Args:
            fields: Exam fields; title is required, an explicit id is honored
            created_by: clientId of the admin creating it

        Returns:
            Stored exam record
        """
        if not fields.get("title"):
            raise ValueError("title required")

        now = self._clock().isoformat()
        exam = {
            **fields,
            "id": fields.get("id") or f"exam-{uuid.uuid4().hex[:12]}",
            "subject": fields.get("subject") or "General",
            "description": fields.get("description") or "",
            "durationMinutes": fields.get("durationMinutes") or 60,
            "questions": fields.get("questions") or [],
            "createdBy": created_by,
            "createdAt": now,
            "updatedAt": now,
        }
        await self.records.put(exam["id"], exam)
        logger.info(f"Exam {exam['id']} saved by {created_by}")
        return exam

    async def update_exam(self, exam_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge updates into an exam. The id never changes. Returns None if absent."""
        exam = await self.records.get(exam_id)
        if exam is None:
            return None

        changes = {k: v for k, v in updates.items() if k not in PROTECTED_FIELDS}
        exam.update(changes)
        exam["id"] = exam_id
        exam["updatedAt"] = self._clock().isoformat()
        await self.records.put(exam_id, exam)
        logger.info(f"Exam {exam_id} updated")
        return exam

    async def delete_exam(self, exam_id: str) -> bool:
        deleted = await self.records.delete(exam_id)
        if deleted:
            logger.info(f"Exam {exam_id} deleted")
        return deleted

    async def stats(self, total_students: int = 0) -> Dict[str, int]:
        """Dashboard counters. Submissions are not tracked yet."""
        exams = await self.records.all()
        return {
            "totalExams": len(exams),
            "totalStudents": total_students,
            "totalSubmissions": 0,
            "pendingReview": 0,
        }
