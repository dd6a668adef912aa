"""Work submission models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from collab.models.base import CollabModel


class SubmissionFile(CollabModel):
    """Reference to a file uploaded elsewhere."""

    name: str
    url: str
    size: Optional[int] = None


class SubmissionCreate(CollabModel):
    """Payload for submitting work on a milestone."""

    milestone_id: Optional[UUID] = None
    by_student_id: Optional[str] = None
    by_group_id: Optional[str] = None
    notes: Optional[str] = None
    files: list[SubmissionFile] = []
    work_url: Optional[str] = None


class Submission(CollabModel):
    """Recorded submission."""

    id: UUID
    milestone_id: UUID
    by_student_id: Optional[str] = None
    by_group_id: Optional[str] = None
    notes: str
    files: list[SubmissionFile]
    work_url: Optional[str] = None
    submitted_at: datetime
