"""Tests for the HTTP layer (submission and admin routers).

Covers:
- 401 without a bearer token, `{"error": "Unauthorized"}` body
- 400 on malformed / unknown-field payloads with field detail
- 403 / 404 / 429 mapping from workflow errors, Retry-After header
- Success bodies for every submission endpoint
- Admin: role update, users list, notification failures
- Health check
"""

from __future__ import annotations

import uuid
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from chickenscratch.api import admin, submissions
from chickenscratch.api.deps import get_actor, get_rate_limiter
from chickenscratch.api.errors import register_error_handlers
from chickenscratch.db.engine import get_session
from chickenscratch.models.profile import Profile
from chickenscratch.models.submission import Submission
from chickenscratch.schemas.roles import RoleRecord
from chickenscratch.security.guards import resolve_capabilities
from chickenscratch.security.rate_limiter import InMemoryRateLimiter
from chickenscratch.workflow.context import ActorContext
from chickenscratch.workflow.errors import (
    ForbiddenError,
    NotEditableError,
    NotesRequiredError,
    NotFoundError,
    RateLimitedError,
)
from chickenscratch.workflow.service import submission_workflow

# ── Helpers ──────────────────────────────────────────────────────────


def _make_actor(positions: tuple[str, ...] = (), roles: tuple[str, ...] = ()) -> ActorContext:
    profile = Profile(id=uuid.uuid4(), external_id="user_1", email="a@b.org", role="student")
    record = RoleRecord(is_member=bool(positions or roles), roles=roles, positions=positions)
    return ActorContext(profile=profile, role=record, capabilities=resolve_capabilities(record))


def _make_submission(owner_id: uuid.UUID) -> Submission:
    return Submission(
        id=uuid.uuid4(),
        owner_id=owner_id,
        title="Hen Songs",
        type="writing",
        text_body="cluck",
        art_files=[],
        status="submitted",
        published=False,
        publish_date=date(2026, 5, 1),
    )


def _build_app(actor: ActorContext | None) -> FastAPI:
    test_app = FastAPI()
    test_app.include_router(submissions.router)
    test_app.include_router(admin.router)
    register_error_handlers(test_app)

    async def fake_session():
        yield AsyncMock()

    test_app.dependency_overrides[get_session] = fake_session
    test_app.dependency_overrides[get_rate_limiter] = lambda: InMemoryRateLimiter()
    if actor is not None:
        test_app.dependency_overrides[get_actor] = lambda: actor
    return test_app


@pytest.fixture
def student():
    return _make_actor()


@pytest.fixture
def client(student):
    return TestClient(_build_app(student))


@pytest.fixture
def anon_client():
    return TestClient(_build_app(None))


# ── Authentication ───────────────────────────────────────────────────


class TestAuthentication:
    def test_401_without_token(self, anon_client):
        resp = anon_client.post(f"/submissions/{uuid.uuid4()}/status", json={"status": "accepted"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized"}

    def test_401_with_bad_token(self, anon_client):
        with patch("chickenscratch.api.auth.settings") as mock_settings:
            mock_settings.security.jwt_secret = "s3cret"
            mock_settings.security.jwt_audience = ""
            mock_settings.security.jwt_algorithm = "HS256"
            resp = anon_client.get("/submissions/mine", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_published_gallery_is_public(self, anon_client):
        with patch.object(submission_workflow, "list_published", new_callable=AsyncMock, return_value=[]):
            resp = anon_client.get("/submissions/published")
        assert resp.status_code == 200
        assert resp.json() == {"data": []}


# ── Validation ───────────────────────────────────────────────────────


class TestValidation:
    def test_status_outside_review_targets(self, client):
        resp = client.post(f"/submissions/{uuid.uuid4()}/status", json={"status": "published"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Invalid status payload."
        assert body["fields"][0]["field"] == "status"

    def test_unknown_field_rejected(self, client):
        resp = client.post(
            f"/submissions/{uuid.uuid4()}/status", json={"status": "accepted", "sneaky": True}
        )
        assert resp.status_code == 400
        assert any(f["field"] == "sneaky" for f in resp.json()["fields"])

    def test_publish_requires_positive_numbers(self, client):
        resp = client.post(
            f"/submissions/{uuid.uuid4()}/publish",
            json={"volume": 0, "issueNumber": 2, "publishDate": "2026-05-01"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid publish payload."

    def test_assign_requires_editor_id_key(self, client):
        resp = client.post(f"/submissions/{uuid.uuid4()}/assign", json={})
        assert resp.status_code == 400

    def test_create_short_title(self, client):
        resp = client.post("/submissions", json={"title": "Hi", "type": "writing", "textBody": "x"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid submission payload."

    def test_create_visual_needs_files(self, client):
        resp = client.post("/submissions", json={"title": "Feathers", "type": "visual"})
        assert resp.status_code == 400

    def test_create_too_many_files(self, client, student):
        files = [f"{student.id}/{i}.png" for i in range(6)]
        resp = client.post("/submissions", json={"title": "Feathers", "type": "visual", "artFiles": files})
        assert resp.status_code == 400

    def test_bad_uuid_path(self, client):
        resp = client.post("/submissions/not-a-uuid/notes", json={"editorNotes": "x"})
        assert resp.status_code == 400


# ── Error mapping ────────────────────────────────────────────────────


class TestErrorMapping:
    def test_notes_required(self, client):
        with patch.object(
            submission_workflow, "change_status", new_callable=AsyncMock, side_effect=NotesRequiredError()
        ):
            resp = client.post(f"/submissions/{uuid.uuid4()}/status", json={"status": "needs_revision"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Editor notes are required for revisions."}

    def test_forbidden_never_names_role(self, client):
        with patch.object(submission_workflow, "publish", new_callable=AsyncMock, side_effect=ForbiddenError()):
            resp = client.post(
                f"/submissions/{uuid.uuid4()}/publish",
                json={"volume": 3, "issueNumber": 2, "publishDate": "2026-05-01"},
            )
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden"}

    def test_not_editable(self, client):
        with patch.object(submission_workflow, "edit", new_callable=AsyncMock, side_effect=NotEditableError()):
            resp = client.patch(f"/submissions/{uuid.uuid4()}", json={"title": "New title"})
        assert resp.status_code == 403
        assert resp.json() == {"error": "This submission is no longer editable."}

    def test_not_found(self, client):
        with patch.object(submission_workflow, "delete", new_callable=AsyncMock, side_effect=NotFoundError()):
            resp = client.delete(f"/submissions/{uuid.uuid4()}")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Submission not found."}

    def test_rate_limited(self, client):
        with patch.object(
            submission_workflow, "create", new_callable=AsyncMock, side_effect=RateLimitedError(5, 1200)
        ):
            resp = client.post("/submissions", json={"title": "Hen Songs", "type": "writing", "textBody": "x"})
        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "1200"
        assert resp.json() == {"error": "You can only submit 5 pieces per hour. Please try again later."}


# ── Success bodies ───────────────────────────────────────────────────


class TestSubmissionEndpoints:
    def test_create_201(self, client, student):
        submission = _make_submission(student.id)
        with patch.object(submission_workflow, "create", new_callable=AsyncMock, return_value=submission):
            resp = client.post("/submissions", json={"title": "Hen Songs", "type": "writing", "textBody": "x"})
        assert resp.status_code == 201
        assert resp.json() == {"success": True, "id": str(submission.id)}

    @pytest.mark.parametrize(
        ("method", "path", "body"),
        [
            ("change_status", "status", {"status": "accepted"}),
            ("assign", "assign", {"editorId": None}),
            ("set_notes", "notes", {"editorNotes": "Nice"}),
            ("publish", "publish", {"volume": 3, "issueNumber": 2, "publishDate": "2026-05-01"}),
        ],
    )
    def test_editorial_success(self, client, method, path, body):
        with patch.object(submission_workflow, method, new_callable=AsyncMock) as mock_op:
            resp = client.post(f"/submissions/{uuid.uuid4()}/{path}", json=body)
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        mock_op.assert_awaited_once()

    def test_delete_body(self, client):
        submission_id = str(uuid.uuid4())
        deleted = {"submission_id": submission_id, "title": "Hen Songs", "files_deleted": 2}
        with patch.object(submission_workflow, "delete", new_callable=AsyncMock, return_value=deleted):
            resp = client.delete(f"/submissions/{submission_id}")
        body = resp.json()
        assert body["success"] is True
        assert body["deleted"] == deleted

    def test_convert_requires_committee(self, client):
        resp = client.post(f"/submissions/{uuid.uuid4()}/convert-to-gdoc")
        assert resp.status_code == 403

    def test_convert_success(self):
        committee = _make_actor(roles=("committee",))
        test_client = TestClient(_build_app(committee))
        url = "https://docs.google.com/document/d/doc1/edit"
        with patch.object(submission_workflow, "convert_to_gdoc", new_callable=AsyncMock, return_value=url):
            resp = test_client.post(f"/submissions/{uuid.uuid4()}/convert-to-gdoc")
        assert resp.json() == {"success": True, "google_doc_url": url}

    def test_mine(self, client, student):
        submission = _make_submission(student.id)
        with patch.object(submission_workflow, "list_mine", new_callable=AsyncMock, return_value=[submission]):
            resp = client.get("/submissions/mine")
        data = resp.json()["data"]
        assert data[0]["id"] == str(submission.id)
        assert data[0]["publish_date"] == "2026-05-01"

    def test_queue_status_filter(self, client):
        with patch.object(submission_workflow, "list_queue", new_callable=AsyncMock, return_value=[]) as mock_q:
            resp = client.get("/submissions/queue?status=in_review")
        assert resp.status_code == 200
        assert mock_q.call_args.args[2].value == "in_review"


# ── Admin endpoints ──────────────────────────────────────────────────


class TestAdminEndpoints:
    def test_role_update_forbidden_for_student(self, client):
        resp = client.post(
            "/admin/roles", json={"userId": str(uuid.uuid4()), "updates": {"is_member": True}}
        )
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden"}

    def test_role_update_invalid_position(self, client):
        resp = client.post(
            "/admin/roles", json={"userId": str(uuid.uuid4()), "updates": {"positions": ["Supreme Rooster"]}}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid role payload."

    def test_role_update_success(self):
        admin_actor = _make_actor(positions=("BBEG",))
        test_client = TestClient(_build_app(admin_actor))
        target = uuid.uuid4()
        record = RoleRecord(is_member=True, roles=("committee",), positions=("Proofreader",))

        with patch(
            "chickenscratch.api.admin.role_resolver.update_user_role", new_callable=AsyncMock, return_value=record
        ) as mock_update:
            resp = test_client.post(
                "/admin/roles",
                json={"userId": str(target), "updates": {"is_member": True, "position": "Proofreader"}},
            )

        assert resp.status_code == 200
        assert resp.json()["data"]["positions"] == ["Proofreader"]
        updates = mock_update.call_args.args[4]
        assert updates.column_values() == {"is_member": True, "positions": ["Proofreader"]}

    def test_users_forbidden_for_committee(self):
        test_client = TestClient(_build_app(_make_actor(roles=("committee",))))
        resp = test_client.get("/admin/users")
        assert resp.status_code == 403

    def test_clear_failures_requires_id_or_all(self):
        test_client = TestClient(_build_app(_make_actor(positions=("BBEG",))))
        resp = test_client.request("DELETE", "/admin/notification-failures", json={})
        assert resp.status_code == 400

    def test_clear_all_failures(self):
        test_client = TestClient(_build_app(_make_actor(positions=("BBEG",))))
        with patch("chickenscratch.api.admin.clear_failures", new_callable=AsyncMock, return_value=4) as mock_clear:
            resp = test_client.request("DELETE", "/admin/notification-failures", json={"all": True})
        assert resp.json() == {"success": True, "removed": 4}
        assert mock_clear.call_args.args[3] is None


# ── Health ───────────────────────────────────────────────────────────


class TestHealth:
    def test_health(self):
        from chickenscratch.main import app

        resp = TestClient(app).get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
