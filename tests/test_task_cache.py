"""Tests for the client task cache: optimistic apply, rollback and invalidation."""

import threading

import pytest

from twistlist.client import APIError, TaskCache


class FakeAPI:
    """
    In-memory stand-in for TwistListClient's task calls.
    Set `fail` to make the next mutation raise.
    """

    def __init__(self, tasks):
        self.tasks = {t["id"]: dict(t) for t in tasks}
        self.fail = None
        self.calls = []
        self.before_mutation = None

    def get_tasks(self, project_id=None, status=None):
        self.calls.append(("get_tasks", project_id, status))
        tasks = [
            dict(t) for t in self.tasks.values()
            if (project_id is None or t["project_id"] == project_id)
            and (status is None or t["status"] == status)
        ]
        return sorted(tasks, key=lambda t: (t["position"], t["id"]))

    def get_task(self, task_id):
        self.calls.append(("get_task", task_id))
        return dict(self.tasks[task_id])

    def _maybe_fail(self):
        if self.before_mutation:
            self.before_mutation()
        if self.fail:
            error, self.fail = self.fail, None
            raise error

    def update_task(self, task_id, updates):
        self.calls.append(("update_task", task_id, updates))
        self._maybe_fail()
        self.tasks[task_id].update(updates)
        return dict(self.tasks[task_id])

    def reorder_tasks(self, positions):
        self.calls.append(("reorder_tasks", positions))
        self._maybe_fail()
        for p in positions:
            self.tasks[p["id"]]["position"] = p["position"]
        return self.get_tasks()


def _task(task_id, position, **fields):
    return {
        "id": task_id,
        "title": f"t{task_id}",
        "status": "PENDING",
        "project_id": 1,
        "position": position,
        **fields,
    }


@pytest.fixture()
def api():
    return FakeAPI([_task(1, 1), _task(2, 2), _task(3, 3)])


@pytest.fixture()
def notified():
    return []


@pytest.fixture()
def cache(api, notified):
    return TaskCache(api, notify=lambda action, exc: notified.append((action, exc)))


def _ids(tasks):
    return [t["id"] for t in tasks]


# ── reads ─────────────────────────────────────────────────────────


class TestReads:
    def test_list_is_cached_until_invalidated(self, cache, api):
        cache.get_tasks(project_id=1)
        cache.get_tasks(project_id=1)
        assert [c for c in api.calls if c[0] == "get_tasks"] == [("get_tasks", 1, None)]

        cache.invalidate_lists()
        assert cache.is_list_stale(project_id=1)
        cache.get_tasks(project_id=1)
        assert len([c for c in api.calls if c[0] == "get_tasks"]) == 2
        assert not cache.is_list_stale(project_id=1)

    def test_returned_views_are_copies(self, cache):
        tasks = cache.get_tasks()
        tasks[0]["title"] = "mutated"

        assert cache.peek_tasks()[0]["title"] == "t1"

    def test_filters_are_separate_views(self, cache):
        cache.get_tasks()
        assert cache.peek_tasks(status="PENDING") is None


# ── update ────────────────────────────────────────────────────────


class TestOptimisticUpdate:
    def test_applied_before_server_answers(self, cache, api):
        cache.get_tasks()
        cache.get_task(2)
        seen = {}
        api.before_mutation = lambda: seen.update(
            list_entry=cache.peek_tasks()[1], detail=cache.peek_task(2)
        )

        cache.update_task(2, {"status": "COMPLETED"})

        assert seen["list_entry"]["status"] == "COMPLETED"
        assert seen["detail"]["status"] == "COMPLETED"

    def test_success_invalidates_list_and_detail(self, cache, api):
        cache.get_tasks()
        cache.get_task(2)

        result = cache.update_task(2, {"title": "renamed"})

        assert result["title"] == "renamed"
        assert cache.is_list_stale()
        assert cache.is_task_stale(2)

    def test_failure_restores_exactly_and_notifies(self, cache, api, notified):
        cache.get_tasks()
        cache.get_task(2)
        before_list, before_detail = cache.peek_tasks(), cache.peek_task(2)
        api.fail = APIError(403, "forbidden")

        with pytest.raises(APIError):
            cache.update_task(2, {"title": "nope", "status": "COMPLETED"})

        assert cache.peek_tasks() == before_list
        assert cache.peek_task(2) == before_detail
        assert notified[0][0] == "update_task"
        assert isinstance(notified[0][1], APIError)

    def test_failure_skips_views_refetched_meanwhile(self, cache, api):
        cache.get_tasks()

        def refetch_then_fail():
            api.tasks[2]["title"] = "server side"
            cache.invalidate_lists()
            cache.get_tasks()
            api.fail = APIError(500, "boom")

        api.before_mutation = refetch_then_fail

        with pytest.raises(APIError):
            cache.update_task(2, {"title": "optimistic"})

        assert cache.peek_tasks()[1]["title"] == "server side"

    def test_same_task_mutations_are_serialized(self, cache, api):
        cache.get_tasks()
        first_in_flight = threading.Event()
        release_first = threading.Event()
        order = []

        def update(value, hold):
            def before():
                order.append(value)
                if hold:
                    first_in_flight.set()
                    release_first.wait(timeout=5)
            return before

        api.before_mutation = update("first", hold=True)
        worker = threading.Thread(target=cache.update_task, args=(2, {"title": "first"}))
        worker.start()
        assert first_in_flight.wait(timeout=5)

        second = threading.Thread(target=cache.update_task, args=(2, {"title": "second"}))
        api_hook = update("second", hold=False)
        second.start()
        second.join(timeout=0.2)
        assert second.is_alive()

        api.before_mutation = api_hook
        release_first.set()
        worker.join(timeout=5)
        second.join(timeout=5)

        assert order == ["first", "second"]
        assert api.tasks[2]["title"] == "second"
        assert cache._entity_locks == {}


# ── reorder ───────────────────────────────────────────────────────


class TestOptimisticReorder:
    NEW_POSITIONS = [
        {"id": 1, "position": 3},
        {"id": 2, "position": 1},
        {"id": 3, "position": 2},
    ]

    def test_reorders_instantly(self, cache, api):
        cache.get_tasks()
        seen = {}
        api.before_mutation = lambda: seen.update(order=_ids(cache.peek_tasks()))

        cache.reorder_tasks(self.NEW_POSITIONS)

        assert seen["order"] == [2, 3, 1]

    def test_failure_restores_previous_order_exactly(self, cache, api, notified):
        cache.get_tasks()
        cache.get_task(1)
        before = cache.peek_tasks()
        api.fail = APIError(500, "boom")

        with pytest.raises(APIError):
            cache.reorder_tasks(self.NEW_POSITIONS)

        assert cache.peek_tasks() == before
        assert cache.peek_task(1)["position"] == 1
        assert notified[0][0] == "reorder_tasks"

    @pytest.mark.parametrize("fail", [False, True])
    def test_lists_invalidated_on_settle(self, cache, api, fail):
        cache.get_tasks()
        if fail:
            api.fail = APIError(500, "boom")

        try:
            cache.reorder_tasks(self.NEW_POSITIONS)
        except APIError:
            pass

        assert cache.is_list_stale()

    def test_refetch_shows_server_order(self, cache, api):
        cache.get_tasks()
        cache.reorder_tasks(self.NEW_POSITIONS)

        assert _ids(cache.get_tasks()) == [2, 3, 1]

    def test_rollback_without_custom_notifier(self, api):
        cache = TaskCache(api)
        cache.get_tasks()
        api.fail = APIError(500, "boom")

        with pytest.raises(APIError):
            cache.reorder_tasks(self.NEW_POSITIONS)

        assert _ids(cache.peek_tasks()) == [1, 2, 3]


class TestMutationLocks:
    def test_locks_are_dropped_once_mutations_settle(self, cache, api):
        cache.get_tasks()

        cache.update_task(1, {"title": "renamed"})
        api.fail = APIError(500, "boom")
        with pytest.raises(APIError):
            cache.update_task(2, {"title": "nope"})
        cache.reorder_tasks(TestOptimisticReorder.NEW_POSITIONS)

        assert cache._entity_locks == {}
        assert cache._entity_users == {}
