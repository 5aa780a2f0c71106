"""Tests for the audit logger and handled-issue logging.

Covers:
- Audit row written inside a savepoint with the action value
- Savepoint failure is swallowed and logged as a handled issue
- handled_issue_fields: None skipped, "error" keys renamed, cause flattened
"""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from chickenscratch.models.audit import AuditLog
from chickenscratch.models.enums import AuditAction
from chickenscratch.observability import handled_issue_fields, log_handled_issue
from chickenscratch.security.audit import AuditLogger

# ── Helpers ──────────────────────────────────────────────────────────


def _make_db(fail: bool = False) -> MagicMock:
    db = MagicMock()
    if fail:
        db.begin_nested.side_effect = SQLAlchemyError("savepoint failed")
    else:
        db.begin_nested.return_value.__aenter__ = AsyncMock()
        db.begin_nested.return_value.__aexit__ = AsyncMock(return_value=False)
    return db


# ── AuditLogger ──────────────────────────────────────────────────────


class TestAuditLogger:
    @pytest.mark.asyncio()
    async def test_record_adds_entry_in_savepoint(self):
        db = _make_db()
        submission_id, actor_id = uuid.uuid4(), uuid.uuid4()

        entry = await AuditLogger().record(
            db, submission_id, actor_id, AuditAction.STATUS_CHANGE, {"from": "submitted", "to": "accepted"}
        )

        db.begin_nested.assert_called_once()
        db.add.assert_called_once()
        added = db.add.call_args.args[0]
        assert isinstance(added, AuditLog)
        assert added is entry
        assert added.action == "status_change"
        assert added.submission_id == submission_id
        assert added.details == {"from": "submitted", "to": "accepted"}

    @pytest.mark.asyncio()
    async def test_details_default_to_empty_dict(self):
        db = _make_db()
        entry = await AuditLogger().record(db, uuid.uuid4(), None, AuditAction.NOTE)
        assert entry.details == {}

    @pytest.mark.asyncio()
    async def test_failure_is_swallowed_and_logged(self):
        db = _make_db(fail=True)

        with patch("chickenscratch.security.audit.log_handled_issue") as mock_log:
            entry = await AuditLogger().record(db, uuid.uuid4(), uuid.uuid4(), AuditAction.ASSIGN)

        assert entry is None
        mock_log.assert_called_once()
        assert mock_log.call_args.args[0] == "audit:write"
        assert mock_log.call_args.kwargs["context"]["action"] == "assign"


# ── Handled-issue fields ─────────────────────────────────────────────


class TestHandledIssueFields:
    def test_error_keys_renamed(self):
        fields = handled_issue_fields("scope", context={"error": "x", "providerError": "y", "ok": 1})
        assert fields["issue"] == "x"
        assert fields["providerissue"] == "y"
        assert "error" not in fields
        assert fields["ok"] == 1

    def test_none_values_skipped(self):
        fields = handled_issue_fields("scope", context={"submission_id": None})
        assert "submission_id" not in fields

    def test_exception_cause(self):
        fields = handled_issue_fields("email:send", reason="gave up", cause=ValueError("bad address"))
        assert fields["scope"] == "email:send"
        assert fields["reason"] == "gave up"
        assert fields["cause_name"] == "ValueError"
        assert fields["cause_message"] == "bad address"

    def test_plain_exception_name_omitted(self):
        fields = handled_issue_fields("s", cause=Exception("boom"))
        assert "cause_name" not in fields
        assert fields["cause_message"] == "boom"

    def test_non_exception_cause(self):
        assert handled_issue_fields("s", cause="text")["cause_message"] == "text"
        assert handled_issue_fields("s", cause={"code": 500})["cause_summary"] == '{"code": 500}'

    def test_log_handled_issue_emits_warning(self):
        with patch("chickenscratch.observability._handled") as mock_logger:
            log_handled_issue("storage:remove", reason="failed", context={"files": 2})

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[0] == "handled_issue"
        assert mock_logger.warning.call_args.kwargs["files"] == 2
