import threading
from unittest.mock import MagicMock

import pytest

from infrastructure.supabase_api import RemoteServiceError
from use_cases.report_flow import (
    MISSING_FIELDS_MESSAGE,
    SUBMIT_IN_PROGRESS_MESSAGE,
    SUBMIT_SUCCESS_MESSAGE,
    SUBMIT_TIMEOUT_MESSAGE,
    ReportDraft,
    ReportSubmissionFlow,
)

FIXED_NOW = "2026-03-01T10:00:00+00:00"


def _stored(row, report_id=7):
    return dict(row, id=report_id)


@pytest.fixture
def repo():
    repo = MagicMock()
    repo.list_for_user.return_value = []
    repo.insert.side_effect = lambda row, token=None: _stored(row)
    return repo


@pytest.fixture
def flow(repo):
    return ReportSubmissionFlow(repo, clock=lambda: FIXED_NOW)


@pytest.mark.parametrize(
    "location,description",
    [("", "overflowing bin"), ("123 Main St", ""), ("   ", "overflowing bin"), ("123 Main St", "\n\t ")],
)
def test_submit_with_missing_field_makes_no_write(flow, repo, alice, location, description):
    draft = ReportDraft(location_text=location, description=description)

    result = flow.submit(draft, alice)

    assert result.error_kind == "VALIDATION"
    assert result.message == MISSING_FIELDS_MESSAGE
    repo.insert.assert_not_called()


def test_submit_makes_exactly_one_write(flow, repo, alice):
    draft = ReportDraft(location_text="123 Main St", description="overflowing bin")

    result = flow.submit(draft, alice)

    assert result.ok
    assert result.message == SUBMIT_SUCCESS_MESSAGE
    repo.insert.assert_called_once()
    row, token = repo.insert.call_args.args
    assert row == {
        "location": "123 Main St",
        "description": "overflowing bin",
        "user_id": "u-alice",
        "status": "pending",
        "created_at": FIXED_NOW,
    }
    assert token == "at-a"


def test_submit_prepends_the_stored_record(flow, repo, alice):
    repo.list_for_user.return_value = [
        {"id": 1, "user_id": "u-alice", "location": "Old St", "description": "bags", "status": "Completed", "created_at": "2026-01-01"},
    ]
    flow.ensure_loaded(alice)
    draft = ReportDraft(location_text="123 Main St", description="overflowing bin")

    result = flow.submit(draft, alice)

    assert len(flow.reports) == 2
    assert flow.reports[0] == result.value
    assert flow.reports[0].id == 7
    assert flow.reports[0].status == "pending"
    assert flow.reports[0].location == "123 Main St"
    assert flow.reports[1].location == "Old St"


def test_submit_clears_draft_on_success(flow, alice):
    draft = ReportDraft(location_text="123 Main St", location_search="123 Main", description="overflowing bin", attachments=["a.jpg"])

    flow.submit(draft, alice)

    assert draft == ReportDraft()


def test_submit_timeout_keeps_draft_and_list(repo, alice):
    release = threading.Event()

    def slow_insert(row, token=None):
        release.wait(5)
        return _stored(row)

    repo.insert.side_effect = slow_insert
    flow = ReportSubmissionFlow(repo, submit_timeout=0.05, clock=lambda: FIXED_NOW)
    draft = ReportDraft(location_text="123 Main St", description="overflowing bin")

    result = flow.submit(draft, alice)
    release.set()

    assert result.error_kind == "TIMEOUT"
    assert result.message == SUBMIT_TIMEOUT_MESSAGE
    assert draft.location_text == "123 Main St"
    assert draft.description == "overflowing bin"
    assert flow.reports == []
    assert flow.is_submitting is False


def test_submit_remote_rejection(flow, repo, alice):
    repo.insert.side_effect = RemoteServiceError("new row violates row-level security policy", status_code=403)
    draft = ReportDraft(location_text="123 Main St", description="overflowing bin")

    result = flow.submit(draft, alice)

    assert result.error_kind == "REMOTE_REJECTED"
    assert result.message == "Failed to submit report: new row violates row-level security policy"
    assert draft.description == "overflowing bin"
    assert flow.reports == []


def test_second_submit_while_in_flight_is_refused(repo, alice):
    started = threading.Event()
    release = threading.Event()

    def slow_insert(row, token=None):
        started.set()
        release.wait(5)
        return _stored(row)

    repo.insert.side_effect = slow_insert
    flow = ReportSubmissionFlow(repo, clock=lambda: FIXED_NOW)
    first_draft = ReportDraft(location_text="123 Main St", description="overflowing bin")
    results = []
    worker = threading.Thread(target=lambda: results.append(flow.submit(first_draft, alice)))
    worker.start()
    assert started.wait(2)

    second = flow.submit(ReportDraft(location_text="Elm St", description="sofa"), alice)
    release.set()
    worker.join(2)

    assert second.error_kind == "VALIDATION"
    assert second.message == SUBMIT_IN_PROGRESS_MESSAGE
    assert results[0].ok
    assert repo.insert.call_count == 1


def test_ensure_loaded_queries_once_per_identity(flow, repo, alice, bob):
    flow.ensure_loaded(alice)
    flow.ensure_loaded(alice)
    flow.ensure_loaded(bob)

    assert repo.list_for_user.call_count == 2
    repo.list_for_user.assert_any_call("u-alice", "at-a")
    repo.list_for_user.assert_any_call("u-bob", "at-b")


def test_ensure_loaded_without_session_empties_list(flow, repo, alice):
    repo.list_for_user.return_value = [{"id": 1, "user_id": "u-alice", "location": "A", "description": "B"}]
    flow.ensure_loaded(alice)

    assert flow.ensure_loaded(None) == []
    assert flow.loaded_for is None


def test_load_error_leaves_empty_list(flow, repo, alice):
    repo.list_for_user.side_effect = RemoteServiceError("boom", status_code=500)

    assert flow.load_reports(alice.user_id, alice.access_token) == []
    assert flow.loaded_for == "u-alice"


def test_loaded_rows_default_to_pending(flow, repo, alice):
    repo.list_for_user.return_value = [{"id": 1, "user_id": "u-alice", "location": "A", "description": "B", "status": None}]

    reports = flow.load_reports(alice.user_id)

    assert reports[0].status == "pending"
