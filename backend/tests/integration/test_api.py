"""
API tests: the negotiation and milestone flow over HTTP against an
in-memory database, with mock bearer tokens of the form "<role>:<user_id>".
"""

import json
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from collab.api import deps
from collab.infrastructure.local.mock_auth import MockAuthProvider
from collab.utils.datetime_utils import now_utc
from main import create_app

PARTNER = {"Authorization": "Bearer partner:partner-1"}
OTHER_PARTNER = {"Authorization": "Bearer partner:partner-2"}
STUDENT = {"Authorization": "Bearer student:student-1"}
SUPERVISOR = {"Authorization": "Bearer supervisor:supervisor-1"}


@pytest.fixture
def app(
    proposal_repo,
    milestone_repo,
    finalization_store,
    submission_repo,
    portfolio_repo,
    notification_repo,
    chat_repo,
):
    app = create_app()
    app.dependency_overrides[deps.get_proposal_repository] = lambda: proposal_repo
    app.dependency_overrides[deps.get_milestone_repository] = lambda: milestone_repo
    app.dependency_overrides[deps.get_finalization_store] = lambda: finalization_store
    app.dependency_overrides[deps.get_submission_repository] = lambda: submission_repo
    app.dependency_overrides[deps.get_portfolio_repository] = lambda: portfolio_repo
    app.dependency_overrides[deps.get_notification_repository] = lambda: notification_repo
    app.dependency_overrides[deps.get_chat_repository] = lambda: chat_repo
    app.dependency_overrides[deps.get_auth_provider] = lambda: MockAuthProvider(enabled=True)
    return app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def proposal_body(**overrides) -> dict:
    body = {
        "projectId": "project-1",
        "title": "API redesign",
        "scope": "Redesign the public API surface",
        "acceptanceCriteria": "All endpoints documented and tested",
        "dueDate": (now_utc() + timedelta(days=1)).isoformat(),
    }
    body.update(overrides)
    return body


SUBMISSION = {
    "notes": "Implemented and documented every endpoint",
    "files": [{"name": "report.pdf", "url": "https://files.example/report.pdf", "size": 2048}],
    "workUrl": "https://git.example/api-redesign",
}


async def finalized(client: AsyncClient) -> dict:
    created = await client.post("/api/proposals", json=proposal_body(amount=1000), headers=PARTNER)
    proposal_id = created.json()["id"]
    await client.post(f"/api/proposals/{proposal_id}/accept", headers=STUDENT)
    response = await client.post(f"/api/proposals/{proposal_id}/finalize", headers=PARTNER)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuth:
    async def test_missing_token(self, client):
        response = await client.get("/api/proposals", params={"projectId": "project-1"})
        assert response.status_code == 401

    async def test_bad_scheme(self, client):
        response = await client.get(
            "/api/proposals", params={"projectId": "project-1"}, headers={"Authorization": "Basic abc"},
        )
        assert response.status_code == 401

    async def test_unknown_role(self, client):
        response = await client.get(
            "/api/proposals", params={"projectId": "project-1"}, headers={"Authorization": "Bearer wizard:x"},
        )
        assert response.status_code == 401

    async def test_dev_user_when_auth_disabled(self, app, client):
        app.dependency_overrides[deps.get_auth_provider] = lambda: MockAuthProvider(enabled=False)
        response = await client.post("/api/proposals", json=proposal_body())
        assert response.status_code == 201
        assert response.json()["proposerId"] == "dev_user"


class TestErrorMapping:
    async def test_validation_error_is_400(self, client):
        response = await client.post("/api/proposals", json=proposal_body(title="ab"), headers=PARTNER)
        assert response.status_code == 400
        assert response.json() == {
            "detail": "Proposal title must be at least 3 characters",
            "field": "title",
        }

    @pytest.mark.parametrize("amount", [float("inf"), float("nan")])
    async def test_non_finite_amount_is_400(self, client, proposal_repo, amount):
        # json.dumps writes the non-standard Infinity / NaN literals
        response = await client.post(
            "/api/proposals",
            content=json.dumps(proposal_body(amount=amount)),
            headers={**PARTNER, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["field"] == "amount"
        assert await proposal_repo.list_by_project("project-1") == []

    async def test_not_found_is_404(self, client):
        response = await client.get(
            "/api/proposals/00000000-0000-0000-0000-000000000000", headers=PARTNER,
        )
        assert response.status_code == 404

    async def test_invalid_state_is_409(self, client):
        created = await client.post("/api/proposals", json=proposal_body(amount=1000), headers=PARTNER)
        proposal_id = created.json()["id"]

        response = await client.post(f"/api/proposals/{proposal_id}/finalize", headers=PARTNER)

        assert response.status_code == 409
        assert response.json()["currentStatus"] == "PROPOSED"

    async def test_wrong_role_is_403(self, client):
        created = await client.post("/api/proposals", json=proposal_body(), headers=PARTNER)
        response = await client.post(f"/api/proposals/{created.json()['id']}/accept", headers=PARTNER)
        assert response.status_code == 403


class TestProposalFlow:
    async def test_api_redesign_scenario(self, client):
        created = await client.post("/api/proposals", json=proposal_body(), headers=PARTNER)
        assert created.status_code == 201
        proposal = created.json()
        assert proposal["status"] == "PROPOSED"
        assert proposal["proposerId"] == "partner-1"

        accepted = await client.post(f"/api/proposals/{proposal['id']}/accept", headers=STUDENT)
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "ACCEPTED"
        assert accepted.json()["acceptedBy"] == "student-1"

        no_amount = await client.post(f"/api/proposals/{proposal['id']}/finalize", headers=PARTNER)
        assert no_amount.status_code == 400
        assert no_amount.json()["field"] == "amount"

        amended = await client.patch(f"/api/proposals/{proposal['id']}", json={"amount": 1000}, headers=PARTNER)
        assert amended.status_code == 200

        response = await client.post(f"/api/proposals/{proposal['id']}/finalize", headers=PARTNER)
        assert response.status_code == 201
        milestone = response.json()
        assert milestone["amount"] == 1000
        assert milestone["status"] == "FINALIZED"
        assert milestone["escrowStatus"] == "PENDING"
        assert milestone["supervisorGate"] is False
        assert milestone["sourceProposalId"] == proposal["id"]

    async def test_negotiation_is_posted_to_chat_and_notified(self, client):
        milestone = await finalized(client)

        chat = await client.get("/api/chat/project-1/messages", headers=STUDENT)
        kinds = [m["kind"] for m in chat.json()]
        assert kinds == ["proposal", "proposal_accepted", "proposal_finalized"]

        partner_inbox = await client.get("/api/notifications", headers=PARTNER)
        assert [n["type"] for n in partner_inbox.json()["notifications"]] == ["proposal_accepted"]

        student_inbox = await client.get("/api/notifications", headers=STUDENT)
        body = student_inbox.json()
        assert body["unreadCount"] == 1
        assert body["notifications"][0]["linkId"] == milestone["id"]

    async def test_only_proposer_can_amend(self, client):
        created = await client.post("/api/proposals", json=proposal_body(), headers=PARTNER)
        response = await client.patch(
            f"/api/proposals/{created.json()['id']}", json={"amount": 500}, headers=OTHER_PARTNER,
        )
        assert response.status_code == 403

    async def test_withdraw(self, client):
        created = await client.post("/api/proposals", json=proposal_body(), headers=PARTNER)
        proposal_id = created.json()["id"]

        response = await client.delete(f"/api/proposals/{proposal_id}", headers=PARTNER)
        assert response.status_code == 204

        listed = await client.get("/api/proposals", params={"projectId": "project-1"}, headers=PARTNER)
        assert listed.json() == []


class TestMilestoneFlow:
    async def test_full_lifecycle(self, client):
        milestone = await finalized(client)
        base = f"/api/milestones/{milestone['id']}"

        early = await client.post(f"{base}/start", headers=STUDENT)
        assert early.status_code == 409

        funded = await client.post(f"{base}/escrow", json={"escrowStatus": {"value": "FUNDED"}}, headers=PARTNER)
        assert funded.status_code == 200
        assert funded.json()["escrowStatus"] == "FUNDED"

        assert (await client.post(f"{base}/start", headers=STUDENT)).json()["status"] == "IN_PROGRESS"

        submitted = await client.post(f"{base}/submissions", json=SUBMISSION, headers=STUDENT)
        assert submitted.status_code == 201
        assert submitted.json()["byStudentId"] == "student-1"

        premature = await client.post(f"{base}/partner/release", headers=PARTNER)
        assert premature.status_code == 409

        assert (await client.post(f"{base}/review/start", headers=SUPERVISOR)).status_code == 200
        approved = await client.post(
            f"{base}/review/approve", json={"notes": "Solid work", "progressReadiness": 95}, headers=SUPERVISOR,
        )
        assert approved.json()["status"] == "PARTNER_REVIEW"
        assert approved.json()["supervisorGate"] is True

        permissions = await client.get(f"{base}/permissions", headers=PARTNER)
        assert permissions.json()["canApproveAndRelease"] is True

        released = await client.post(f"{base}/partner/release", json={"rating": 5}, headers=PARTNER)
        assert released.status_code == 200
        assert released.json()["status"] == "RELEASED"
        assert released.json()["escrowStatus"] == "RELEASED"

        portfolio = await client.get("/api/portfolio/student-1", headers=STUDENT)
        assert len(portfolio.json()) == 1
        assert portfolio.json()[0]["amountDelivered"] == 1000

        reputation = await client.get("/api/reputation/student-1", headers=STUDENT)
        assert reputation.status_code == 200
        assert reputation.json()["factors"]["completedProjects"] == 1
        assert reputation.json()["factors"]["averageRating"] == 5

        completed = await client.post(f"{base}/partner/complete", headers=PARTNER)
        assert completed.json()["status"] == "COMPLETED"

    async def test_partner_actions_require_owner(self, client):
        milestone = await finalized(client)
        base = f"/api/milestones/{milestone['id']}"

        response = await client.post(f"{base}/escrow", json={"escrowStatus": "FUNDED"}, headers=OTHER_PARTNER)
        assert response.status_code == 403

        response = await client.post(f"{base}/escrow", json={"escrowStatus": "FUNDED"}, headers=STUDENT)
        assert response.status_code == 403

    async def test_students_cannot_review(self, client):
        milestone = await finalized(client)
        response = await client.post(f"/api/milestones/{milestone['id']}/review/start", headers=STUDENT)
        assert response.status_code == 403

    async def test_change_request_round_trip(self, client):
        milestone = await finalized(client)
        base = f"/api/milestones/{milestone['id']}"
        await client.post(f"{base}/escrow", json={"escrowStatus": "FUNDED"}, headers=PARTNER)
        await client.post(f"{base}/start", headers=STUDENT)
        await client.post(f"{base}/submissions", json=SUBMISSION, headers=STUDENT)

        short = await client.post(f"{base}/review/request-changes", json={"notes": "redo"}, headers=SUPERVISOR)
        assert short.status_code == 400

        changes = await client.post(
            f"{base}/review/request-changes", json={"notes": "Please add integration tests"}, headers=SUPERVISOR,
        )
        assert changes.json()["status"] == "CHANGES_REQUESTED"

        inbox = await client.get("/api/notifications", params={"unreadOnly": True}, headers=STUDENT)
        types = [n["type"] for n in inbox.json()["notifications"]]
        assert "changes_requested" in types

        read_all = await client.post("/api/notifications/read-all", headers=STUDENT)
        assert read_all.json()["updatedCount"] == len(types)

        resubmitted = await client.post(f"{base}/submissions", json=SUBMISSION, headers=STUDENT)
        assert resubmitted.status_code == 201
        submissions = await client.get(f"{base}/submissions", headers=SUPERVISOR)
        assert len(submissions.json()) == 2

    async def test_delete_before_work(self, client):
        milestone = await finalized(client)
        response = await client.delete(f"/api/milestones/{milestone['id']}", headers=PARTNER)
        assert response.status_code == 204

        listed = await client.get("/api/milestones", params={"projectId": "project-1"}, headers=PARTNER)
        assert listed.json() == []


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
