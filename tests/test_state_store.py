import importlib
import os
import threading
import unittest
from unittest.mock import patch

from _test_utils import add_src_to_path

add_src_to_path()

state_store = importlib.import_module("orderlist.web_portal.state_store")
order_list_state = importlib.import_module("orderlist.web_portal.order_list_state")


class TestFilterStateStore(unittest.TestCase):
    def setUp(self) -> None:
        self.store = state_store.FilterStateStore(
            lambda: order_list_state.FilterState(page_size=10)
        )

    def test_state_created_once_per_session(self) -> None:
        first = self.store.get("s1")
        self.assertIs(self.store.get("s1"), first)
        self.assertIsNot(self.store.get("s2"), first)
        self.assertEqual(len(self.store), 2)

    def test_discard_starts_over(self) -> None:
        state = self.store.get("s1")
        state.apply_update(order_list_state.PageChange("10", "3"))
        self.store.discard("s1")
        self.assertNotIn("s1", self.store)
        self.assertEqual(self.store.get("s1").page_index, 0)
        self.store.discard("missing")

    def test_new_session_ids_are_unique(self) -> None:
        ids = {state_store.FilterStateStore.new_session_id() for _ in range(50)}
        self.assertEqual(len(ids), 50)

    def test_locked_serializes_same_session(self) -> None:
        entered = threading.Event()
        release = threading.Event()
        order: list[str] = []

        def hold() -> None:
            with self.store.locked("s1"):
                entered.set()
                release.wait(timeout=5)
                order.append("first")

        def contend() -> None:
            with self.store.locked("s1"):
                order.append("second")

        holder = threading.Thread(target=hold)
        holder.start()
        self.assertTrue(entered.wait(timeout=5))
        contender = threading.Thread(target=contend)
        contender.start()
        contender.join(timeout=0.2)
        self.assertTrue(contender.is_alive())
        with self.store.locked("s2") as other:
            self.assertIsNotNone(other)
        release.set()
        holder.join(timeout=5)
        contender.join(timeout=5)
        self.assertEqual(order, ["first", "second"])


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestIdleSessionExpiry(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.store = state_store.FilterStateStore(
            lambda: order_list_state.FilterState(page_size=10),
            ttl_sec=60,
            clock=self.clock,
        )

    def test_idle_session_is_dropped(self) -> None:
        state = self.store.get("idle")
        state.apply_update(order_list_state.PageChange("10", "4"))
        self.clock.now += 61
        self.store.get("fresh")
        self.assertNotIn("idle", self.store)
        self.assertEqual(self.store.get("idle").page_index, 0)

    def test_recent_access_keeps_session(self) -> None:
        self.store.get("s1")
        self.clock.now += 45
        self.store.get("s1")
        self.clock.now += 45
        self.store.get("other")
        self.assertIn("s1", self.store)

    def test_cookieless_requests_do_not_accumulate(self) -> None:
        for _ in range(1000):
            self.store.get(self.store.new_session_id())
            self.clock.now += 1
        self.assertLessEqual(len(self.store), 61)

    def test_session_in_use_is_not_dropped(self) -> None:
        with self.store.locked("busy") as state:
            self.clock.now += 120
            self.store.get("other")
            self.assertIn("busy", self.store)
            self.assertIs(self.store.get("busy"), state)

    def test_zero_ttl_keeps_everything(self) -> None:
        store = state_store.FilterStateStore(ttl_sec=0, clock=self.clock)
        store.get("s1")
        self.clock.now += 10**6
        store.get("s2")
        self.assertEqual(len(store), 2)

    def test_ttl_read_from_environment(self) -> None:
        with patch.dict(os.environ, {"ORDER_LIST_SESSION_TTL_SEC": "5"}, clear=True):
            store = state_store.FilterStateStore(clock=self.clock)
        store.get("s1")
        self.clock.now += 6
        store.get("s2")
        self.assertNotIn("s1", store)


if __name__ == "__main__":
    unittest.main()
