"""Unit tests for FlushJob and summary composition.

Tests cover:
- Summary format and overflow line
- Idempotence when nothing is pending
- Exact delivery and bookkeeping
- Partial failure resilience
- Rows enqueued during a flush
- Users without identity
- Overlapping runs
"""

import threading
from unittest.mock import MagicMock

import pytest

from infrastructure.operations import OperationResult
from modules.notifications.flush import DIGEST_TITLE, FlushJob, compose_summary
from modules.notifications.identities import InMemoryIdentityDirectory
from modules.notifications.models import GroupOutcome, PendingGroup
from modules.notifications.queue import InMemoryNotificationQueue
from tests.factories.notifications import make_queued_notifications


@pytest.mark.unit
class TestComposeSummary:
    def test_single_entry(self, queued_notification_factory):
        row = queued_notification_factory(
            project_name="Website", action="更新標題", card_title="Fix login"
        )

        title, summary = compose_summary([row])

        assert title == "你有 1 個新通知"
        assert summary == "1. [Website] 更新標題: Fix login"

    def test_exactly_five_entries_has_no_overflow_line(self):
        title, summary = compose_summary(make_queued_notifications(5))

        assert title == "你有 5 個新通知"
        assert summary.splitlines() == [
            f"{i}. [Website] 更新標題: Card {i}" for i in range(1, 6)
        ]

    def test_overflow_line(self):
        title, summary = compose_summary(make_queued_notifications(7))

        lines = summary.splitlines()
        assert title == "你有 7 個新通知"
        assert len(lines) == 6
        assert lines[0] == "1. [Website] 更新標題: Card 1"
        assert lines[4] == "5. [Website] 更新標題: Card 5"
        assert lines[5] == "...還有 2 則通知"

    def test_custom_max_lines(self):
        _, summary = compose_summary(make_queued_notifications(4), max_lines=2)

        assert summary.splitlines() == [
            "1. [Website] 更新標題: Card 1",
            "2. [Website] 更新標題: Card 2",
            "...還有 2 則通知",
        ]


@pytest.fixture
def flush_job(queue, mock_personal_channel):
    return FlushJob(queue=queue, personal_channel=mock_personal_channel)


def _enqueue_many(queue, user_id, count):
    return [queue.enqueue(user_id, "Website", f"Card {i}", "更新標題") for i in range(1, count + 1)]


@pytest.mark.unit
class TestFlushJob:
    def test_nothing_pending(self, flush_job, mock_personal_channel):
        report = flush_job.flush()

        assert report.sent == 0
        assert report.users == 0
        mock_personal_channel.send.assert_not_called()

    def test_second_flush_is_noop(self, flush_job, queue, mock_personal_channel):
        _enqueue_many(queue, "u-1", 2)

        first = flush_job.flush()
        second = flush_job.flush()

        assert (first.sent, first.users) == (2, 1)
        assert (second.sent, second.users) == (0, 0)
        assert mock_personal_channel.send.call_count == 1

    def test_seven_rows_single_digest(self, flush_job, queue, mock_personal_channel):
        rows = _enqueue_many(queue, "u-1", 7)

        report = flush_job.flush()

        assert report.sent == 7
        assert report.users == 1
        assert report.outcomes == {"u-1": GroupOutcome.DELIVERED}
        mock_personal_channel.send.assert_called_once()
        args, kwargs = mock_personal_channel.send.call_args
        assert args[0] == "U-line-1"
        assert kwargs["title"] == DIGEST_TITLE
        assert kwargs["caption"] == "你有 7 個新通知"
        assert kwargs["alt_text"] == "你有 7 個新通知"
        lines = kwargs["body"].splitlines()
        assert lines[0] == "1. [Website] 更新標題: Card 1"
        assert lines[-1] == "...還有 2 則通知"
        assert len(lines) == 6
        assert all(row.sent for row in queue.all_rows())
        assert {row.id for row in queue.all_rows()} == {row.id for row in rows}

    def test_partial_failure_leaves_failed_user_pending(
        self, flush_job, queue, mock_personal_channel
    ):
        _enqueue_many(queue, "u-1", 3)
        _enqueue_many(queue, "u-2", 2)

        def send(identity, **kwargs):
            if identity == "U-line-2":
                return OperationResult.transient_error("timeout", error_code="TIMEOUT")
            return OperationResult.success()

        mock_personal_channel.send.side_effect = send

        report = flush_job.flush()

        assert report.sent == 3
        assert report.users == 2
        assert report.failed_users == 1
        assert report.outcomes == {
            "u-1": GroupOutcome.DELIVERED,
            "u-2": GroupOutcome.FAILED,
        }
        pending = queue.fetch_pending_grouped_by_user()
        assert list(pending) == ["u-2"]
        assert pending["u-2"].count == 2

    def test_next_run_delivers_only_previously_failed_user(
        self, flush_job, queue, mock_personal_channel
    ):
        _enqueue_many(queue, "u-1", 3)
        _enqueue_many(queue, "u-2", 2)
        mock_personal_channel.send.side_effect = lambda identity, **kwargs: (
            OperationResult.transient_error("timeout")
            if identity == "U-line-2"
            else OperationResult.success()
        )
        flush_job.flush()

        mock_personal_channel.send.reset_mock()
        mock_personal_channel.send.side_effect = None
        mock_personal_channel.send.return_value = OperationResult.success()
        report = flush_job.flush()

        assert report.sent == 2
        assert report.users == 1
        assert report.outcomes == {"u-2": GroupOutcome.DELIVERED}
        mock_personal_channel.send.assert_called_once()
        assert mock_personal_channel.send.call_args.args[0] == "U-line-2"
        assert queue.fetch_pending_grouped_by_user() == {}

    def test_failed_user_retried_next_run(self, flush_job, queue, mock_personal_channel):
        _enqueue_many(queue, "u-1", 2)
        mock_personal_channel.send.return_value = OperationResult.transient_error("down")
        assert flush_job.flush().sent == 0

        mock_personal_channel.send.return_value = OperationResult.success()
        report = flush_job.flush()

        assert report.sent == 2
        assert queue.fetch_pending_grouped_by_user() == {}

    def test_send_exception_is_failed_outcome(self, flush_job, queue, mock_personal_channel):
        _enqueue_many(queue, "u-1", 1)
        _enqueue_many(queue, "u-2", 1)
        mock_personal_channel.send.side_effect = [RuntimeError("boom"), OperationResult.success()]

        report = flush_job.flush()

        assert report.sent == 1
        assert report.users == 2
        assert report.failed_users == 1

    def test_user_without_identity_skipped_and_pending(self, mock_personal_channel, clock):
        identities = InMemoryIdentityDirectory({"u-1": "U-line-1"})
        queue = InMemoryNotificationQueue(identities=identities, clock=clock)
        _enqueue_many(queue, "u-1", 1)
        _enqueue_many(queue, "u-unlinked", 2)
        job = FlushJob(queue=queue, personal_channel=mock_personal_channel)

        report = job.flush()

        assert report.sent == 1
        assert report.users == 1
        assert report.skipped_users == 1
        assert report.outcomes["u-unlinked"] == GroupOutcome.SKIPPED
        assert mock_personal_channel.send.call_count == 1
        assert queue.fetch_pending_grouped_by_user()["u-unlinked"].count == 2

    def test_row_enqueued_during_flush_stays_pending(
        self, queue, mock_personal_channel
    ):
        _enqueue_many(queue, "u-1", 2)

        def send(identity, **kwargs):
            # A new event lands between fetch and mark_sent
            queue.enqueue("u-1", "Website", "Late card", "更新標題")
            return OperationResult.success()

        mock_personal_channel.send.side_effect = send
        job = FlushJob(queue=queue, personal_channel=mock_personal_channel)

        report = job.flush()

        assert report.sent == 2
        pending = queue.fetch_pending_grouped_by_user()
        assert [e.card_title for e in pending["u-1"].entries] == ["Late card"]

    def test_mark_sent_failure_is_failed_outcome(self, mock_personal_channel):
        row_queue = MagicMock()
        rows = make_queued_notifications(2)
        row_queue.fetch_pending_grouped_by_user.return_value = {
            "u-1": PendingGroup(user_id="u-1", identity="U1", entries=rows)
        }
        row_queue.mark_sent.side_effect = RuntimeError("deadlock")
        job = FlushJob(queue=row_queue, personal_channel=mock_personal_channel)

        report = job.flush()

        assert report.sent == 0
        assert report.users == 1
        assert report.outcomes == {"u-1": GroupOutcome.FAILED}
        row_queue.mark_sent.assert_called_once_with([r.id for r in rows])

    def test_fetch_failure_propagates(self, mock_personal_channel):
        broken_queue = MagicMock()
        broken_queue.fetch_pending_grouped_by_user.side_effect = RuntimeError("db down")
        job = FlushJob(queue=broken_queue, personal_channel=mock_personal_channel)

        with pytest.raises(RuntimeError):
            job.flush()

        # The lock is released after a failure
        broken_queue.fetch_pending_grouped_by_user.side_effect = None
        broken_queue.fetch_pending_grouped_by_user.return_value = {}
        assert job.flush().already_running is False

    def test_overlapping_flush_is_skipped(self, queue, mock_personal_channel):
        _enqueue_many(queue, "u-1", 1)
        entered = threading.Event()
        release = threading.Event()

        def slow_send(identity, **kwargs):
            entered.set()
            release.wait(timeout=5)
            return OperationResult.success()

        mock_personal_channel.send.side_effect = slow_send
        job = FlushJob(queue=queue, personal_channel=mock_personal_channel)
        results = {}
        worker = threading.Thread(target=lambda: results.setdefault("first", job.flush()))
        worker.start()
        assert entered.wait(timeout=5)

        second = job.flush()
        release.set()
        worker.join(timeout=5)

        assert second.already_running is True
        assert second.sent == 0
        assert results["first"].sent == 1
