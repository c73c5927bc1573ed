"""Unit tests for duplicate_service module."""

import pytest

from tasklist.domain.task import TaskStatus, TaskType
from tasklist.services import duplicate_service
from tests.unit.mocks import make_task


async def _check(store, title, *, task_type=TaskType.SHOPPING, **kwargs):
    kwargs.setdefault("threshold", 0.95)
    kwargs.setdefault("max_results", 3)
    return await duplicate_service.check_duplicates(
        store,
        title=title,
        task_type=task_type,
        tenant_id="tenant-1",
        location_id="loc-1",
        **kwargs,
    )


@pytest.mark.unit
class TestIsSimilarTitle:
    """Tests for is_similar_title."""

    def test_exact_after_normalization(self):
        """Trim and case-fold before exact comparison."""
        assert duplicate_service.is_similar_title("Milk", "  mILK ", threshold=0.95)

    def test_threshold_is_strict(self):
        """A score equal to the threshold is not a match."""
        assert not duplicate_service.is_similar_title("milk", "silk", threshold=0.75)
        assert duplicate_service.is_similar_title("milk", "silk", threshold=0.74)

    def test_long_near_match(self):
        """One edit in a long title scores above 0.95."""
        assert duplicate_service.is_similar_title(
            "Organic whole milk 2 liters", "Organic whole milk 2 liter", threshold=0.95
        )

    def test_short_near_match_below_threshold(self):
        """One edit in a short title scores below 0.95."""
        assert not duplicate_service.is_similar_title("Toothpaste", "Toothpastes", threshold=0.95)


@pytest.mark.unit
class TestCheckDuplicates:
    """Tests for check_duplicates."""

    async def test_no_candidates(self, store):
        """Empty store never reports a duplicate."""
        result = await _check(store, "Milk")

        assert result.is_duplicate is False
        assert result.similar_tasks == []
        assert result.message is None

    async def test_open_task_collides(self, store):
        """Same title, type and location while OPEN is a duplicate."""
        existing = store.seed(make_task(type=TaskType.SHOPPING, title="Milk"))

        result = await _check(store, "milk ")

        assert result.is_duplicate is True
        assert [t.id for t in result.similar_tasks] == [existing.id]
        assert result.message == "Found 1 similar task(s)"

    async def test_in_progress_task_collides(self, store):
        """IN_PROGRESS counts as active."""
        store.seed(make_task(type=TaskType.SHOPPING, title="Milk", status=TaskStatus.IN_PROGRESS))

        assert (await _check(store, "Milk")).is_duplicate

    @pytest.mark.parametrize("status", [TaskStatus.DONE, TaskStatus.ARCHIVED])
    async def test_finished_tasks_ignored(self, store, status):
        """Done or archived items can be added again."""
        store.seed(make_task(type=TaskType.SHOPPING, title="Milk", status=status))

        assert not (await _check(store, "Milk")).is_duplicate

    @pytest.mark.parametrize(
        "overrides",
        [
            {"type": TaskType.TODO},
            {"location_id": "loc-2"},
            {"tenant_id": "tenant-2"},
        ],
        ids=["other_type", "other_location", "other_tenant"],
    )
    async def test_out_of_scope_ignored(self, store, overrides):
        """Only same tenant, location and type are compared."""
        store.seed(make_task(title="Milk", **{"type": TaskType.SHOPPING, **overrides}))

        assert not (await _check(store, "Milk")).is_duplicate

    async def test_other_users_personal_task_skipped(self, store):
        """Another user's personal task never surfaces in a conflict."""
        store.seed(make_task(type=TaskType.NOTE, title="Call supplier", is_personal=True, created_by="alice"))

        as_bob = await _check(store, "Call supplier", task_type=TaskType.NOTE, requester_id="bob")
        as_alice = await _check(store, "Call supplier", task_type=TaskType.NOTE, requester_id="alice")
        unscoped = await _check(store, "Call supplier", task_type=TaskType.NOTE)

        assert not as_bob.is_duplicate
        assert as_alice.is_duplicate
        assert unscoped.is_duplicate

    async def test_matches_capped(self, store):
        """At most max_results tasks are attached; the message counts all of them."""
        for _ in range(5):
            store.seed(make_task(type=TaskType.SHOPPING, title="Milk"))

        result = await _check(store, "MILK", max_results=3)

        assert result.is_duplicate
        assert len(result.similar_tasks) == 3
        assert result.message == "Found 5 similar task(s)"

    async def test_custom_threshold(self, store):
        """A lower threshold widens matching."""
        store.seed(make_task(type=TaskType.SHOPPING, title="silk"))

        assert not (await _check(store, "milk")).is_duplicate
        assert (await _check(store, "milk", threshold=0.5)).is_duplicate

    async def test_read_only(self, store):
        """Checking never writes."""
        store.seed(make_task(type=TaskType.SHOPPING, title="Milk"))

        await _check(store, "Milk")

        assert store.write_count == 0
