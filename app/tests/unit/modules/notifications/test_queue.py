"""Unit tests for the in-memory notification queue."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from modules.notifications.identities import InMemoryIdentityDirectory
from modules.notifications.queue import InMemoryNotificationQueue
from tests.factories.notifications import BASE_TIME, StepClock


@pytest.mark.unit
class TestInMemoryNotificationQueueEnqueue:
    def test_enqueue_returns_unsent_row(self, queue):
        row = queue.enqueue("u-1", "Website", "Fix login", "更新標題")

        assert row.id
        assert row.user_id == "u-1"
        assert row.project_name == "Website"
        assert row.card_title == "Fix login"
        assert row.action == "更新標題"
        assert row.sent is False
        assert row.sent_at is None
        assert row.created_at == BASE_TIME

    def test_enqueue_assigns_unique_ids(self, queue):
        ids = {queue.enqueue("u-1", "P", f"C{i}", "A").id for i in range(20)}

        assert len(ids) == 20

    @patch("modules.notifications.queue.logger")
    def test_enqueue_logs(self, mock_logger, queue):
        row = queue.enqueue("u-1", "P", "C", "A")

        mock_logger.info.assert_called_with(
            "notification_enqueued", user_id="u-1", notification_id=row.id
        )


@pytest.mark.unit
class TestInMemoryNotificationQueueFetch:
    def test_fetch_empty(self, queue):
        assert queue.fetch_pending_grouped_by_user() == {}

    def test_groups_by_user_oldest_first(self, queue):
        queue.enqueue("u-1", "P", "first", "A")
        queue.enqueue("u-2", "P", "other", "A")
        queue.enqueue("u-1", "P", "second", "A")

        groups = queue.fetch_pending_grouped_by_user()

        assert set(groups) == {"u-1", "u-2"}
        assert [e.card_title for e in groups["u-1"].entries] == ["first", "second"]
        assert groups["u-1"].identity == "U-line-1"
        assert groups["u-2"].identity == "U-line-2"

    def test_ties_broken_by_insertion_order(self, identities):
        queue = InMemoryNotificationQueue(identities=identities, clock=lambda: BASE_TIME)
        for title in ["a", "b", "c", "d"]:
            queue.enqueue("u-1", "P", title, "A")

        groups = queue.fetch_pending_grouped_by_user()

        assert [e.card_title for e in groups["u-1"].entries] == ["a", "b", "c", "d"]

    def test_user_without_identity_has_none(self, clock):
        queue = InMemoryNotificationQueue(identities=InMemoryIdentityDirectory(), clock=clock)
        queue.enqueue("u-9", "P", "C", "A")

        groups = queue.fetch_pending_grouped_by_user()

        assert groups["u-9"].identity is None
        assert groups["u-9"].count == 1

    def test_identity_resolved_at_fetch_time(self, queue, identities):
        queue.enqueue("u-1", "P", "C", "A")
        identities.set_identity("u-1", "U-relinked")

        groups = queue.fetch_pending_grouped_by_user()

        assert groups["u-1"].identity == "U-relinked"

    def test_sent_rows_excluded(self, queue):
        first = queue.enqueue("u-1", "P", "C1", "A")
        queue.enqueue("u-1", "P", "C2", "A")
        queue.mark_sent([first.id])

        groups = queue.fetch_pending_grouped_by_user()

        assert [e.card_title for e in groups["u-1"].entries] == ["C2"]


@pytest.mark.unit
class TestInMemoryNotificationQueueMarkSent:
    def test_marks_exactly_given_ids(self, queue):
        rows = [queue.enqueue("u-1", "P", f"C{i}", "A") for i in range(3)]

        updated = queue.mark_sent([rows[0].id, rows[2].id])

        assert updated == 2
        by_id = {row.id: row for row in queue.all_rows()}
        assert by_id[rows[0].id].sent is True
        assert by_id[rows[0].id].sent_at is not None
        assert by_id[rows[1].id].sent is False
        assert by_id[rows[2].id].sent is True

    def test_already_sent_rows_untouched(self, identities):
        clock = StepClock()
        queue = InMemoryNotificationQueue(identities=identities, clock=clock)
        row = queue.enqueue("u-1", "P", "C", "A")

        assert queue.mark_sent([row.id]) == 1
        first_sent_at = queue.all_rows()[0].sent_at

        assert queue.mark_sent([row.id]) == 0
        assert queue.all_rows()[0].sent_at == first_sent_at
        assert first_sent_at == BASE_TIME + timedelta(seconds=1)

    def test_unknown_ids_ignored(self, queue):
        assert queue.mark_sent(["does-not-exist"]) == 0

    def test_empty_ids(self, queue):
        assert queue.mark_sent([]) == 0
