"""
Exams Module - Black Box Interface

Purpose: Store exam records for the admin dashboard and public listing
Interface: list_exams(), get_exam(), create_exam(), update_exam(), delete_exam(), stats()
Hidden: Record layout, id generation

Exam content is opaque; only title is required.
"""

from .exams import ExamModule

__all__ = ["ExamModule"]
