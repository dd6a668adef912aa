"""
Milestone lifecycle service.

Moves a milestone through work, submission, supervisor review, partner review,
release and completion. Every status change goes through ``ALLOWED_TRANSITIONS``
and the escrow/supervisor guards, and is written conditionally on the version
that was read.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from collab.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from collab.core.logger import setup_logger
from collab.interfaces.milestone_repository import IMilestoneRepository
from collab.models.enums import EscrowStatus, MilestoneStatus
from collab.models.milestone import Milestone, MilestoneUpdate, ReleaseRequest
from collab.models.submission import Submission, SubmissionCreate
from collab.services.portfolio_service import PortfolioService
from collab.services.submission_service import (
    SECURED_ESCROW,
    SubmissionService,
    can_resubmit,
    can_submit,
)

logger = setup_logger(__name__)

ALLOWED_TRANSITIONS: dict[MilestoneStatus, set[MilestoneStatus]] = {
    MilestoneStatus.FINALIZED: {MilestoneStatus.IN_PROGRESS},
    MilestoneStatus.IN_PROGRESS: {MilestoneStatus.SUBMITTED},
    MilestoneStatus.SUBMITTED: {
        MilestoneStatus.SUPERVISOR_REVIEW,
        MilestoneStatus.PARTNER_REVIEW,
        MilestoneStatus.CHANGES_REQUESTED,
    },
    MilestoneStatus.SUPERVISOR_REVIEW: {
        MilestoneStatus.PARTNER_REVIEW,
        MilestoneStatus.CHANGES_REQUESTED,
    },
    MilestoneStatus.PARTNER_REVIEW: {
        MilestoneStatus.RELEASED,
        MilestoneStatus.CHANGES_REQUESTED,
    },
    MilestoneStatus.CHANGES_REQUESTED: {MilestoneStatus.SUBMITTED},
    MilestoneStatus.RELEASED: {MilestoneStatus.COMPLETED, MilestoneStatus.PARTNER_REVIEW},
    MilestoneStatus.COMPLETED: {MilestoneStatus.RELEASED},
}

REVIEW_NOTES_MIN_LENGTH = 10
ESCROW_TRANSITIONS: dict[EscrowStatus, set[EscrowStatus]] = {
    EscrowStatus.PENDING: {EscrowStatus.FUNDED},
    EscrowStatus.FUNDED: {EscrowStatus.HELD},
}


def transition_error(milestone: Milestone, target: MilestoneStatus) -> Optional[str]:
    """Why ``milestone`` cannot move to ``target``, or None if it can."""
    current = milestone.status
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        return f"Cannot move milestone from {current.value} to {target.value}"

    escrow = milestone.escrow_status
    if target == MilestoneStatus.IN_PROGRESS or current == MilestoneStatus.IN_PROGRESS:
        if escrow != EscrowStatus.FUNDED:
            return f"Escrow must be FUNDED (currently {escrow.value})"

    if current == MilestoneStatus.CHANGES_REQUESTED and escrow not in SECURED_ESCROW:
        return f"Escrow must be FUNDED or HELD (currently {escrow.value})"

    if target == MilestoneStatus.RELEASED:
        if not milestone.supervisor_gate:
            return "Supervisor approval is required before release"
        # Coming back from COMPLETED the payout has already gone out.
        if current == MilestoneStatus.PARTNER_REVIEW and escrow not in SECURED_ESCROW:
            return f"Escrow must be FUNDED or HELD (currently {escrow.value})"

    return None


def can_transition(milestone: Milestone, target: MilestoneStatus) -> bool:
    return transition_error(milestone, target) is None


class MilestoneLifecycle:
    """Service for milestone state changes."""

    def __init__(
        self,
        milestone_repo: IMilestoneRepository,
        submission_service: SubmissionService,
        portfolio_service: Optional[PortfolioService] = None,
    ):
        self.milestone_repo = milestone_repo
        self.submission_service = submission_service
        self.portfolio_service = portfolio_service

    async def get_milestone(self, milestone_id: UUID) -> Milestone:
        milestone = await self.milestone_repo.get(milestone_id)
        if not milestone:
            raise NotFoundError(f"Milestone {milestone_id} not found")
        return milestone

    async def list_project_milestones(self, project_id: str) -> list[Milestone]:
        return await self.milestone_repo.list_by_project(project_id)

    async def _transition(
        self,
        milestone: Milestone,
        target: MilestoneStatus,
        **changes,
    ) -> Milestone:
        error = transition_error(milestone, target)
        if error:
            raise InvalidStateError(error, current_status=milestone.status.value)

        updated = await self.milestone_repo.update(
            milestone.id,
            MilestoneUpdate(status=target, **changes),
            expected_version=milestone.version,
        )
        logger.info(
            "Milestone %s moved %s -> %s",
            milestone.id,
            milestone.status.value,
            target.value,
        )
        return updated

    async def update_status(self, milestone_id: UUID, status: MilestoneStatus) -> Milestone:
        """
        Guarded transition to ``status``.

        Edges that carry escrow or portfolio changes (release, revert,
        completion) run through their named operation so the status never
        moves without them.
        """
        milestone = await self.get_milestone(milestone_id)
        edge = (milestone.status, status)
        if edge == (MilestoneStatus.PARTNER_REVIEW, MilestoneStatus.RELEASED):
            return await self.approve_and_release(milestone_id)
        if edge == (MilestoneStatus.RELEASED, MilestoneStatus.PARTNER_REVIEW):
            return await self.revert_release(milestone_id)
        if edge == (MilestoneStatus.RELEASED, MilestoneStatus.COMPLETED):
            return await self.mark_complete(milestone_id)
        return await self._transition(milestone, status)

    # ===========================================
    # Escrow and work
    # ===========================================

    async def update_escrow_status(
        self,
        milestone_id: UUID,
        escrow_status: EscrowStatus,
    ) -> Milestone:
        """
        Record an escrow change reported by the funding collaborator.

        Funding is only accepted before work starts; funded escrow can then
        be put on hold. Nothing here moves money.
        """
        milestone = await self.get_milestone(milestone_id)
        current = milestone.escrow_status
        if escrow_status not in ESCROW_TRANSITIONS.get(current, set()):
            raise InvalidStateError(
                f"Cannot change escrow from {current.value} to {escrow_status.value}",
                current_status=milestone.status.value,
            )
        if escrow_status == EscrowStatus.FUNDED and milestone.status != MilestoneStatus.FINALIZED:
            raise InvalidStateError(
                f"Escrow can only be funded while the milestone is FINALIZED "
                f"(currently {milestone.status.value})",
                current_status=milestone.status.value,
            )

        updated = await self.milestone_repo.update(
            milestone.id,
            MilestoneUpdate(escrow_status=escrow_status),
            expected_version=milestone.version,
        )
        logger.info("Milestone %s escrow %s -> %s", milestone.id, current.value, escrow_status.value)
        return updated

    async def start_work(self, milestone_id: UUID) -> Milestone:
        milestone = await self.get_milestone(milestone_id)
        return await self._transition(milestone, MilestoneStatus.IN_PROGRESS)

    # ===========================================
    # Submission
    # ===========================================

    async def mark_submitted(self, milestone_id: UUID) -> Milestone:
        milestone = await self.get_milestone(milestone_id)
        return await self._transition(milestone, MilestoneStatus.SUBMITTED)

    async def submit_work(self, milestone_id: UUID, data: SubmissionCreate) -> Submission:
        """
        Record a submission and move the milestone to SUBMITTED.

        The payload is validated before the milestone is touched; the
        submission and the status change then commit together.
        """
        milestone = await self.get_milestone(milestone_id)
        if not (can_submit(milestone) or can_resubmit(milestone)):
            raise InvalidStateError(
                "Milestone must be IN_PROGRESS with FUNDED escrow, or CHANGES_REQUESTED with "
                f"FUNDED or HELD escrow, to accept a submission (status {milestone.status.value}, "
                f"escrow {milestone.escrow_status.value})",
                current_status=milestone.status.value,
            )
        data = data.model_copy(update={"milestone_id": milestone.id})
        submission = await self.submission_service.submit(data, milestone_version=milestone.version)
        logger.info(
            "Milestone %s moved %s -> %s",
            milestone.id,
            milestone.status.value,
            MilestoneStatus.SUBMITTED.value,
        )
        return submission

    # ===========================================
    # Supervisor review
    # ===========================================

    async def begin_supervisor_review(self, milestone_id: UUID) -> Milestone:
        milestone = await self.get_milestone(milestone_id)
        return await self._transition(milestone, MilestoneStatus.SUPERVISOR_REVIEW)

    async def approve_for_partner(
        self,
        milestone_id: UUID,
        notes: Optional[str] = None,
        progress_readiness: int = 100,
    ) -> Milestone:
        """Open the supervisor gate and hand the milestone to the partner."""
        if not 0 <= progress_readiness <= 100:
            raise ValidationError(
                "Progress readiness must be between 0 and 100",
                field="progress_readiness",
            )
        milestone = await self.get_milestone(milestone_id)
        if milestone.status not in (MilestoneStatus.SUBMITTED, MilestoneStatus.SUPERVISOR_REVIEW):
            raise InvalidStateError(
                f"Cannot approve milestone with status {milestone.status.value}",
                current_status=milestone.status.value,
            )
        return await self._transition(
            milestone,
            MilestoneStatus.PARTNER_REVIEW,
            supervisor_gate=True,
            review_notes=(notes or "").strip() or None,
            progress_readiness=progress_readiness,
        )

    async def request_changes_by_supervisor(self, milestone_id: UUID, notes: Optional[str]) -> Milestone:
        cleaned = _require_review_notes(notes)
        milestone = await self.get_milestone(milestone_id)
        if milestone.status not in (MilestoneStatus.SUBMITTED, MilestoneStatus.SUPERVISOR_REVIEW):
            raise InvalidStateError(
                f"Cannot request changes on milestone with status {milestone.status.value}",
                current_status=milestone.status.value,
            )
        return await self._transition(
            milestone,
            MilestoneStatus.CHANGES_REQUESTED,
            supervisor_gate=False,
            review_notes=cleaned,
        )

    # ===========================================
    # Partner review
    # ===========================================

    async def request_changes_by_partner(
        self,
        milestone_id: UUID,
        notes: Optional[str] = None,
    ) -> Milestone:
        """Send the work back; the resubmission goes through supervisor review again."""
        milestone = await self.get_milestone(milestone_id)
        if milestone.status != MilestoneStatus.PARTNER_REVIEW:
            raise InvalidStateError(
                f"Cannot request changes on milestone with status {milestone.status.value}",
                current_status=milestone.status.value,
            )
        changes = {"supervisor_gate": False}
        if notes and notes.strip():
            changes["review_notes"] = notes.strip()
        return await self._transition(milestone, MilestoneStatus.CHANGES_REQUESTED, **changes)

    async def approve_and_release(
        self,
        milestone_id: UUID,
        release: Optional[ReleaseRequest] = None,
    ) -> Milestone:
        """
        Release the payout and credit the students.

        Portfolio creation runs after the release is committed; a failure
        there is logged and does not undo the release.
        """
        milestone = await self.get_milestone(milestone_id)
        released = await self._transition(
            milestone,
            MilestoneStatus.RELEASED,
            escrow_status=EscrowStatus.RELEASED,
        )
        await self._credit_portfolio(released, release)
        return released

    async def revert_release(self, milestone_id: UUID) -> Milestone:
        """Undo a release; the payout goes back on hold."""
        milestone = await self.get_milestone(milestone_id)
        return await self._transition(
            milestone,
            MilestoneStatus.PARTNER_REVIEW,
            escrow_status=EscrowStatus.HELD,
        )

    async def mark_complete(
        self,
        milestone_id: UUID,
        release: Optional[ReleaseRequest] = None,
    ) -> Milestone:
        milestone = await self.get_milestone(milestone_id)
        completed = await self._transition(milestone, MilestoneStatus.COMPLETED)
        await self._credit_portfolio(completed, release)
        return completed

    async def unmark_complete(self, milestone_id: UUID) -> Milestone:
        milestone = await self.get_milestone(milestone_id)
        return await self._transition(milestone, MilestoneStatus.RELEASED)

    async def delete_milestone(self, milestone_id: UUID) -> None:
        milestone = await self.get_milestone(milestone_id)
        if milestone.status != MilestoneStatus.FINALIZED:
            raise InvalidStateError(
                f"Cannot delete milestone with status {milestone.status.value}",
                current_status=milestone.status.value,
            )
        await self.milestone_repo.delete(milestone_id)
        logger.info("Milestone %s deleted", milestone_id)

    async def _credit_portfolio(
        self,
        milestone: Milestone,
        release: Optional[ReleaseRequest],
    ) -> None:
        if not self.portfolio_service:
            return
        release = release or ReleaseRequest()
        try:
            await self.portfolio_service.create_for_milestone(
                milestone,
                student_ids=release.student_ids,
                role=release.role,
                rating=release.rating,
            )
        except Exception as e:
            logger.warning("Portfolio creation failed for milestone %s: %s", milestone.id, e)


def _require_review_notes(notes: Optional[str]) -> str:
    cleaned = (notes or "").strip()
    if len(cleaned) < REVIEW_NOTES_MIN_LENGTH:
        raise ValidationError(
            f"Review notes must be at least {REVIEW_NOTES_MIN_LENGTH} characters",
            field="notes",
        )
    return cleaned
