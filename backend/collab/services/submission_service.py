"""
Submission service.

Validates and records work submitted against a milestone. When the caller
passes the milestone version, the store also moves the milestone to
SUBMITTED in the same commit.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional
from uuid import UUID, uuid4

from collab.core.exceptions import ValidationError
from collab.core.logger import setup_logger
from collab.interfaces.submission_repository import ISubmissionRepository
from collab.models.enums import EscrowStatus, MilestoneStatus
from collab.models.milestone import Milestone
from collab.models.submission import Submission, SubmissionCreate
from collab.utils.datetime_utils import now_utc

logger = setup_logger(__name__)

NOTES_MIN_LENGTH = 10

# Money is still in escrow; HELD is where a reverted release leaves it.
SECURED_ESCROW = frozenset({EscrowStatus.FUNDED, EscrowStatus.HELD})


def can_submit(milestone: Milestone) -> bool:
    """First submission: work started and escrow funded."""
    return (
        milestone.status == MilestoneStatus.IN_PROGRESS
        and milestone.escrow_status == EscrowStatus.FUNDED
    )


def can_resubmit(milestone: Milestone) -> bool:
    """Resubmission after a change request, including one made after a reverted release."""
    return (
        milestone.status == MilestoneStatus.CHANGES_REQUESTED
        and milestone.escrow_status in SECURED_ESCROW
    )


class SubmissionService:
    """Service for recording milestone submissions."""

    def __init__(
        self,
        submission_repo: ISubmissionRepository,
        max_files: int = 10,
        max_file_bytes: int = 10 * 1024 * 1024,
        notes_max_length: int = 2000,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.submission_repo = submission_repo
        self.max_files = max_files
        self.max_file_bytes = max_file_bytes
        self.notes_max_length = notes_max_length
        self.clock = clock

    def validate(self, data: SubmissionCreate) -> str:
        """
        Check a submission payload and return its trimmed notes.

        Raises:
            ValidationError: Naming the first offending field
        """
        if not data.milestone_id:
            raise ValidationError("Milestone ID is required", field="milestone_id")

        has_student = bool((data.by_student_id or "").strip())
        has_group = bool((data.by_group_id or "").strip())
        if not has_student and not has_group:
            raise ValidationError("Either student ID or group ID is required", field="by_student_id")
        if has_student and has_group:
            raise ValidationError(
                "A submission belongs to a student or a group, not both",
                field="by_group_id",
            )

        notes = (data.notes or "").strip()
        if len(notes) < NOTES_MIN_LENGTH:
            raise ValidationError(
                f"Submission notes must be at least {NOTES_MIN_LENGTH} characters",
                field="notes",
            )
        if len(notes) > self.notes_max_length:
            raise ValidationError(
                f"Submission notes must be at most {self.notes_max_length} characters",
                field="notes",
            )

        if not data.files:
            raise ValidationError("At least one file is required for submission", field="files")
        if len(data.files) > self.max_files:
            raise ValidationError(f"At most {self.max_files} files can be submitted", field="files")
        for item in data.files:
            if item.size is not None and item.size > self.max_file_bytes:
                raise ValidationError(f"File {item.name} exceeds the size limit", field="files")

        return notes

    async def submit(self, data: SubmissionCreate, milestone_version: Optional[int] = None) -> Submission:
        """
        Validate and store a submission stamped with the current time.

        With ``milestone_version`` the milestone moves to SUBMITTED in the
        same transaction, conditional on that version; a stale version
        raises ``ConcurrencyError`` and nothing is stored.
        """
        notes = self.validate(data)
        submission = Submission(
            id=uuid4(),
            milestone_id=data.milestone_id,
            by_student_id=(data.by_student_id or "").strip() or None,
            by_group_id=(data.by_group_id or "").strip() or None,
            notes=notes,
            files=data.files,
            work_url=data.work_url,
            submitted_at=self.clock(),
        )
        if milestone_version is None:
            stored = await self.submission_repo.add(submission)
        else:
            stored = await self.submission_repo.add_and_mark_submitted(submission, milestone_version)
        logger.info("Submission %s recorded for milestone %s", stored.id, stored.milestone_id)
        return stored

    async def list_submissions(self, milestone_id: UUID) -> list[Submission]:
        return await self.submission_repo.list_by_milestone(milestone_id)
