"""
Client-side task cache with optimistic updates.

Holds list views (keyed by their filters) and detail entries (keyed by
task id). Mutations are applied to the cache before the server answers
and rolled back from a snapshot if the server call fails.

Mutations touching the same task are serialized through a per-task lock,
so a failing mutation can only roll back the state it applied itself.
Rollbacks are also skipped for any view that was refetched after the
snapshot was taken; the fetched data is newer than the snapshot.
"""
import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from twistlist.utils.logger import get_logger

logger = get_logger(__name__)

ListKey = Tuple[Optional[int], Optional[str]]
Notifier = Callable[[str, Exception], None]


def _log_failure(action: str, exc: Exception):
    logger.error("%s failed: %s", action, exc)


@dataclass
class _EntitySnapshot:
    task_id: int
    # list key -> (generation, entry copy or None)
    list_entries: Dict[ListKey, Tuple[int, Optional[dict]]] = field(default_factory=dict)
    # (generation, detail copy or None)
    detail: Optional[Tuple[int, Optional[dict]]] = None


@dataclass
class _OrderSnapshot:
    # list key -> (generation, ids in order)
    list_orders: Dict[ListKey, Tuple[int, List[int]]] = field(default_factory=dict)
    # task id -> previous position, per list key and for details
    list_positions: Dict[ListKey, Dict[int, Any]] = field(default_factory=dict)
    detail_positions: Dict[int, Tuple[int, Any]] = field(default_factory=dict)


class TaskCache:
    def __init__(self, api, notify: Optional[Notifier] = None):
        self._api = api
        self._notify = notify or _log_failure

        self._lists: Dict[ListKey, List[dict]] = {}
        self._details: Dict[int, dict] = {}
        self._stale_lists: set = set()
        self._stale_details: set = set()

        # Bumped whenever fresh server data replaces a cached view
        self._list_generation: Dict[ListKey, int] = {}
        self._detail_generation: Dict[int, int] = {}

        self._lock = threading.RLock()
        self._entity_locks: Dict[int, threading.Lock] = {}
        # Holders and waiters per task; a lock is dropped when this reaches zero
        self._entity_users: Dict[int, int] = {}

    @staticmethod
    def list_key(project_id: Optional[int] = None, status: Optional[str] = None) -> ListKey:
        return (project_id, status)

    # --- Reads ---

    def get_tasks(self, project_id: Optional[int] = None, status: Optional[str] = None) -> List[dict]:
        """
        Cached list view; fetched on a miss or after invalidation.
        """
        key = self.list_key(project_id, status)
        with self._lock:
            if key in self._lists and key not in self._stale_lists:
                return copy.deepcopy(self._lists[key])

        tasks = self._api.get_tasks(project_id=project_id, status=status)
        with self._lock:
            self._lists[key] = copy.deepcopy(tasks)
            self._stale_lists.discard(key)
            self._list_generation[key] = self._list_generation.get(key, 0) + 1
            return copy.deepcopy(tasks)

    def get_task(self, task_id: int) -> dict:
        with self._lock:
            if task_id in self._details and task_id not in self._stale_details:
                return copy.deepcopy(self._details[task_id])

        task = self._api.get_task(task_id)
        with self._lock:
            self._details[task_id] = copy.deepcopy(task)
            self._stale_details.discard(task_id)
            self._detail_generation[task_id] = self._detail_generation.get(task_id, 0) + 1
            return copy.deepcopy(task)

    def peek_tasks(self, project_id: Optional[int] = None, status: Optional[str] = None) -> Optional[List[dict]]:
        """
        Cached list view without fetching, or None.
        """
        with self._lock:
            tasks = self._lists.get(self.list_key(project_id, status))
            return copy.deepcopy(tasks) if tasks is not None else None

    def peek_task(self, task_id: int) -> Optional[dict]:
        with self._lock:
            task = self._details.get(task_id)
            return copy.deepcopy(task) if task is not None else None

    def is_list_stale(self, project_id: Optional[int] = None, status: Optional[str] = None) -> bool:
        with self._lock:
            return self.list_key(project_id, status) in self._stale_lists

    def is_task_stale(self, task_id: int) -> bool:
        with self._lock:
            return task_id in self._stale_details

    # --- Invalidation ---

    def invalidate_lists(self):
        with self._lock:
            self._stale_lists.update(self._lists.keys())

    def invalidate_task(self, task_id: int):
        with self._lock:
            if task_id in self._details:
                self._stale_details.add(task_id)

    # --- Per-task mutation queue ---

    def _checkout_locks(self, task_ids: List[int]) -> List[threading.Lock]:
        with self._lock:
            locks = []
            for task_id in task_ids:
                lock = self._entity_locks.get(task_id)
                if lock is None:
                    lock = self._entity_locks[task_id] = threading.Lock()
                self._entity_users[task_id] = self._entity_users.get(task_id, 0) + 1
                locks.append(lock)
            return locks

    def _return_locks(self, task_ids: List[int]):
        with self._lock:
            for task_id in task_ids:
                self._entity_users[task_id] -= 1
                if not self._entity_users[task_id]:
                    del self._entity_users[task_id]
                    del self._entity_locks[task_id]

    @contextmanager
    def _locked(self, task_ids: Iterable[int]):
        # Sorted acquisition keeps overlapping reorders deadlock-free
        ordered = sorted(set(task_ids))
        locks = self._checkout_locks(ordered)
        acquired = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            self._return_locks(ordered)

    # --- Mutations ---

    def update_task(self, task_id: int, updates: Dict[str, Any]) -> dict:
        """
        Applies `updates` to the cached list entries and detail at once,
        then sends them. Success invalidates lists and detail; failure
        restores the snapshot, notifies, and re-raises.
        """
        with self._locked([task_id]):
            snapshot = self._apply_fields(task_id, updates)
            try:
                result = self._api.update_task(task_id, updates)
            except Exception as exc:
                self._restore_entity(snapshot)
                self._notify("update_task", exc)
                raise

            self.invalidate_lists()
            self.invalidate_task(task_id)
            return result

    def reorder_tasks(self, positions: List[Dict[str, int]]) -> Any:
        """
        Re-sorts the cached lists by the new positions at once, then sends
        them. Failure restores the previous order exactly. Lists are
        invalidated either way.
        """
        new_positions = {p["id"]: p["position"] for p in positions}
        with self._locked(new_positions):
            snapshot = self._apply_positions(new_positions)
            try:
                return self._api.reorder_tasks(positions)
            except Exception as exc:
                self._restore_order(snapshot)
                self._notify("reorder_tasks", exc)
                raise
            finally:
                self.invalidate_lists()

    # --- Optimistic apply / rollback ---

    def _apply_fields(self, task_id: int, updates: Dict[str, Any]) -> _EntitySnapshot:
        with self._lock:
            snapshot = _EntitySnapshot(task_id=task_id)

            for key, tasks in self._lists.items():
                for index, task in enumerate(tasks):
                    if task.get("id") == task_id:
                        snapshot.list_entries[key] = (self._list_generation.get(key, 0), copy.deepcopy(task))
                        tasks[index] = {**task, **updates}
                        break

            if task_id in self._details:
                detail = self._details[task_id]
                snapshot.detail = (self._detail_generation.get(task_id, 0), copy.deepcopy(detail))
                self._details[task_id] = {**detail, **updates}

            return snapshot

    def _restore_entity(self, snapshot: _EntitySnapshot):
        with self._lock:
            for key, (generation, previous) in snapshot.list_entries.items():
                if self._list_generation.get(key, 0) != generation or key not in self._lists:
                    continue
                tasks = self._lists[key]
                for index, task in enumerate(tasks):
                    if task.get("id") == snapshot.task_id:
                        tasks[index] = previous
                        break

            if snapshot.detail is not None:
                generation, previous = snapshot.detail
                if self._detail_generation.get(snapshot.task_id, 0) == generation:
                    self._details[snapshot.task_id] = previous

    def _apply_positions(self, new_positions: Dict[int, int]) -> _OrderSnapshot:
        with self._lock:
            snapshot = _OrderSnapshot()

            for key, tasks in self._lists.items():
                snapshot.list_orders[key] = (
                    self._list_generation.get(key, 0),
                    [task.get("id") for task in tasks],
                )
                snapshot.list_positions[key] = {
                    task["id"]: task.get("position")
                    for task in tasks
                    if task.get("id") in new_positions
                }
                reordered = [
                    {**task, "position": new_positions[task["id"]]} if task.get("id") in new_positions else task
                    for task in tasks
                ]
                # Stable sort: tasks without a position keep their relative place at the end
                reordered.sort(key=lambda t: (t.get("position") is None, t.get("position") or 0))
                self._lists[key] = reordered

            for task_id, position in new_positions.items():
                if task_id in self._details:
                    detail = self._details[task_id]
                    snapshot.detail_positions[task_id] = (
                        self._detail_generation.get(task_id, 0),
                        detail.get("position"),
                    )
                    self._details[task_id] = {**detail, "position": position}

            return snapshot

    def _restore_order(self, snapshot: _OrderSnapshot):
        with self._lock:
            for key, (generation, order) in snapshot.list_orders.items():
                if self._list_generation.get(key, 0) != generation or key not in self._lists:
                    continue
                previous_positions = snapshot.list_positions.get(key, {})
                rank = {task_id: index for index, task_id in enumerate(order)}
                restored = [
                    {**task, "position": previous_positions[task["id"]]} if task.get("id") in previous_positions else task
                    for task in self._lists[key]
                ]
                restored.sort(key=lambda t: rank.get(t.get("id"), len(rank)))
                self._lists[key] = restored

            for task_id, (generation, position) in snapshot.detail_positions.items():
                if self._detail_generation.get(task_id, 0) == generation and task_id in self._details:
                    self._details[task_id] = {**self._details[task_id], "position": position}
