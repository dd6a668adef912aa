"""
Proposal lifecycle service.

Drives a milestone proposal from PROPOSED through ACCEPTED to FINALIZED and
materializes the milestone on finalization. Status only ever moves forward;
every write is conditional on the version that was read.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

from collab.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from collab.core.logger import setup_logger
from collab.interfaces.finalization_store import IFinalizationStore
from collab.interfaces.proposal_repository import IProposalRepository
from collab.models.enums import ProposalStatus
from collab.models.milestone import Milestone, MilestoneCreate
from collab.models.proposal import (
    DateInput,
    MilestoneProposal,
    MilestoneProposalCreate,
    MilestoneProposalUpdate,
)
from collab.utils.datetime_utils import coerce_utc, now_utc, start_of_day_utc

logger = setup_logger(__name__)

TITLE_MIN_LENGTH = 3
SCOPE_MIN_LENGTH = 10
CRITERIA_MIN_LENGTH = 10


def _require_text(value: Optional[str], field: str, min_length: int, message: str) -> str:
    text = (value or "").strip()
    if len(text) < min_length:
        raise ValidationError(message, field=field)
    return text


def validate_title(value: Optional[str]) -> str:
    return _require_text(
        value, "title", TITLE_MIN_LENGTH,
        f"Proposal title must be at least {TITLE_MIN_LENGTH} characters",
    )


def validate_scope(value: Optional[str]) -> str:
    return _require_text(
        value, "scope", SCOPE_MIN_LENGTH,
        f"Scope must be at least {SCOPE_MIN_LENGTH} characters",
    )


def validate_acceptance_criteria(value: Optional[str]) -> str:
    return _require_text(
        value, "acceptance_criteria", CRITERIA_MIN_LENGTH,
        f"Acceptance criteria must be at least {CRITERIA_MIN_LENGTH} characters",
    )


def validate_due_date(value: Optional[DateInput], now: datetime) -> datetime:
    """Parse the due date and reject anything before today (UTC midnight)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Due date is required", field="due_date")
    try:
        due_date = coerce_utc(value)
    except ValueError as exc:
        raise ValidationError("Due date is not a valid date", field="due_date") from exc
    if due_date < start_of_day_utc(now):
        raise ValidationError("Due date must be in the future", field="due_date")
    return due_date


def validate_amount(value: Optional[float], required: bool) -> Optional[float]:
    """
    Optional amounts may be None or zero; required ones must be positive.

    JSON bodies can carry ``Infinity`` and ``NaN``, so finiteness is
    checked before any comparison.
    """
    if value is None:
        if required:
            raise ValidationError("Amount must be greater than zero", field="amount")
        return None
    if not math.isfinite(value):
        raise ValidationError("Amount must be a finite number", field="amount")
    if value < 0:
        raise ValidationError("Amount cannot be negative", field="amount")
    if required and value == 0:
        raise ValidationError("Amount must be greater than zero", field="amount")
    return value


class ProposalLifecycle:
    """Service for negotiating milestone proposals."""

    def __init__(
        self,
        proposal_repo: IProposalRepository,
        finalization_store: IFinalizationStore,
        clock: Callable[[], datetime] = now_utc,
        currency: str = "USD",
    ):
        self.proposal_repo = proposal_repo
        self.finalization_store = finalization_store
        self.clock = clock
        self.currency = currency

    async def get_proposal(self, proposal_id: UUID) -> MilestoneProposal:
        proposal = await self.proposal_repo.get(proposal_id)
        if not proposal:
            raise NotFoundError(f"Proposal {proposal_id} not found")
        return proposal

    async def list_project_proposals(self, project_id: str) -> list[MilestoneProposal]:
        return await self.proposal_repo.list_by_project(project_id)

    async def create_proposal(self, data: MilestoneProposalCreate) -> MilestoneProposal:
        """
        Validate and store a new proposal in PROPOSED status.

        Fields are checked in a fixed order and the first failure is raised,
        so nothing is written for an invalid payload.

        Raises:
            ValidationError: Naming the first offending field
        """
        project_id = (data.project_id or "").strip()
        if not project_id:
            raise ValidationError("Project ID is required", field="project_id")
        proposer_id = (data.proposer_id or "").strip()
        if not proposer_id:
            raise ValidationError("Proposer ID is required", field="proposer_id")

        title = validate_title(data.title)
        scope = validate_scope(data.scope)
        acceptance_criteria = validate_acceptance_criteria(data.acceptance_criteria)
        due_date = validate_due_date(data.due_date, self.clock())
        amount = validate_amount(data.amount, required=False)

        proposal = await self.proposal_repo.create(
            project_id=project_id,
            proposer_id=proposer_id,
            title=title,
            scope=scope,
            acceptance_criteria=acceptance_criteria,
            due_date=due_date,
            amount=amount,
        )
        logger.info("Proposal %s created for project %s", proposal.id, project_id)
        return proposal

    async def accept_proposal(
        self,
        proposal_id: UUID,
        accepted_by: Optional[str] = None,
    ) -> MilestoneProposal:
        """
        Move a PROPOSED proposal to ACCEPTED.

        Raises:
            NotFoundError: Unknown proposal
            InvalidStateError: Proposal is not PROPOSED
            ConcurrencyError: Another request changed the proposal first
        """
        proposal = await self.get_proposal(proposal_id)
        if proposal.status != ProposalStatus.PROPOSED:
            raise InvalidStateError(
                f"Cannot accept proposal with status {proposal.status.value}",
                current_status=proposal.status.value,
            )

        accepted = await self.proposal_repo.update(
            proposal_id,
            proposal.version,
            {
                "status": ProposalStatus.ACCEPTED,
                "accepted_by": accepted_by,
                "accepted_at": self.clock(),
            },
        )
        logger.info("Proposal %s accepted by %s", proposal_id, accepted_by or "unknown")
        return accepted

    async def update_proposal_terms(
        self,
        proposal_id: UUID,
        update: MilestoneProposalUpdate,
    ) -> MilestoneProposal:
        """Amend the terms of a proposal that has not been finalized yet."""
        proposal = await self.get_proposal(proposal_id)
        if proposal.status == ProposalStatus.FINALIZED:
            raise InvalidStateError(
                "Cannot change the terms of a finalized proposal",
                current_status=proposal.status.value,
            )

        supplied = update.model_dump(exclude_unset=True)
        changes: dict[str, Any] = {}
        if "title" in supplied:
            changes["title"] = validate_title(update.title)
        if "scope" in supplied:
            changes["scope"] = validate_scope(update.scope)
        if "acceptance_criteria" in supplied:
            changes["acceptance_criteria"] = validate_acceptance_criteria(update.acceptance_criteria)
        if "due_date" in supplied:
            changes["due_date"] = validate_due_date(update.due_date, self.clock())
        if "amount" in supplied:
            changes["amount"] = validate_amount(update.amount, required=True)

        if not changes:
            return proposal
        return await self.proposal_repo.update(proposal_id, proposal.version, changes)

    async def finalize_proposal(self, proposal_id: UUID, finalizer_id: str) -> Milestone:
        """
        Finalize an ACCEPTED proposal and create its milestone.

        The milestone insert and the proposal's move to FINALIZED are
        committed together by the finalization store.

        Raises:
            NotFoundError: Unknown proposal
            InvalidStateError: Proposal is not ACCEPTED
            ValidationError: Proposal has no positive amount
            ConcurrencyError: Another request changed the proposal first
        """
        proposal = await self.get_proposal(proposal_id)
        if proposal.status != ProposalStatus.ACCEPTED:
            raise InvalidStateError(
                "Cannot finalize proposal. Proposal must be accepted by students first. "
                f"Current status: {proposal.status.value}",
                current_status=proposal.status.value,
            )
        if not proposal.amount or not math.isfinite(proposal.amount) or proposal.amount <= 0:
            raise ValidationError(
                "Proposal must have a valid amount to be finalized",
                field="amount",
            )

        milestone = await self.finalization_store.finalize(
            proposal_id,
            proposal.version,
            MilestoneCreate(
                project_id=proposal.project_id,
                source_proposal_id=proposal.id,
                title=proposal.title,
                scope=proposal.scope,
                acceptance_criteria=proposal.acceptance_criteria,
                due_date=proposal.due_date,
                amount=proposal.amount,
                currency=self.currency,
                finalized_by=finalizer_id,
            ),
        )
        logger.info(
            "Proposal %s finalized by %s into milestone %s",
            proposal_id,
            finalizer_id,
            milestone.id,
        )
        return milestone

    async def withdraw_proposal(self, proposal_id: UUID) -> None:
        """Delete a proposal nobody has accepted yet."""
        proposal = await self.get_proposal(proposal_id)
        if proposal.status != ProposalStatus.PROPOSED:
            raise InvalidStateError(
                f"Cannot withdraw proposal with status {proposal.status.value}",
                current_status=proposal.status.value,
            )
        await self.proposal_repo.delete(proposal_id)
        logger.info("Proposal %s withdrawn", proposal_id)
