import importlib
import os
import unittest
from unittest.mock import patch

import psycopg

from _test_utils import (
    DummyConn,
    DummyContext,
    DummyServerCursor,
    add_src_to_path,
    make_order_rows,
)

add_src_to_path()

app_module = importlib.import_module("orderlist.web_portal.app")
orders_routes = importlib.import_module("orderlist.web_portal.routes.orders")
order_service = importlib.import_module("orderlist.web_portal.order_service")
order_conditions = importlib.import_module("orderlist.web_portal.order_conditions")
state_store = importlib.import_module("orderlist.web_portal.state_store")
order_list_state = importlib.import_module("orderlist.web_portal.order_list_state")


class _FakeOrderStore:
    """Serve rows through the real executor using dummy cursors."""

    def __init__(self, rows, *, error=None):
        self.rows = rows
        self.error = error
        self.cursors = []

    def load(self, state, facility=None):
        cursor = DummyServerCursor(
            self.rows,
            fail_on="execute" if self.error else None,
            error=self.error,
        )
        self.cursors.append(cursor)
        conn = DummyConn(cursor)
        return order_service.load_order_page(
            state,
            facility,
            connection_factory=lambda: DummyContext(conn),
            builder=order_conditions.ConditionBuilder(legacy_filter=False),
        )


class OrderRoutesTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = state_store.FilterStateStore(
            lambda: order_list_state.FilterState(page_size=10)
        )
        self.app = app_module.create_app(store=self.store, secret_key="test", load_env=False)
        self.client = self.app.test_client()
        self.fake = _FakeOrderStore(make_order_rows(25))
        patcher = patch.object(orders_routes, "load_order_page", side_effect=self.fake.load)
        patcher.start()
        self.addCleanup(patcher.stop)
        env_patcher = patch.dict(os.environ, {}, clear=True)
        env_patcher.start()
        self.addCleanup(env_patcher.stop)


class TestListOrders(OrderRoutesTestCase):
    def test_first_request_uses_defaults(self) -> None:
        response = self.client.get("/orders")
        self.assertEqual(response.status_code, 200)
        payload = response.get_json()
        self.assertEqual(payload["total"], 25)
        self.assertEqual(len(payload["orders"]), 10)
        self.assertEqual(payload["view_index"], 0)
        self.assertTrue(payload["has_next"])
        self.assertFalse(payload["has_previous"])
        self.assertEqual(payload["update"], "no_change")
        self.assertTrue(payload["state"]["status"]["viewcreated"])
        self.assertEqual(len(self.store), 1)

    def test_paging_persists_across_requests(self) -> None:
        self.client.get("/orders?viewSize=10&viewIndex=2")
        payload = self.client.get("/orders").get_json()
        self.assertEqual(payload["view_index"], 2)
        self.assertEqual(len(payload["orders"]), 5)
        self.assertFalse(payload["has_next"])
        self.assertTrue(payload["has_previous"])

    def test_selection_change_resets_page(self) -> None:
        self.client.get("/orders?viewSize=10&viewIndex=2")
        payload = self.client.get(
            "/orders?changeStatusAndTypeState=Y&viewcreated=Y"
            "&view_SALES_ORDER=Y&filterAuthProblems=Y&viewIndex=2&viewSize=10"
        ).get_json()
        self.assertEqual(payload["update"], "selection_applied")
        self.assertEqual(payload["view_index"], 0)
        query, params = self.fake.cursors[-1].executed
        self.assertIn("status_id = %s", query)
        self.assertEqual(params, ["ORDER_CREATED", "SALES_ORDER", "filterAuthProblems"])

    def test_bad_paging_leaves_state(self) -> None:
        self.client.get("/orders?viewSize=10&viewIndex=1")
        payload = self.client.get("/orders?viewSize=ten&viewIndex=x").get_json()
        self.assertEqual(payload["update"], "page_rejected")
        self.assertEqual(payload["view_index"], 1)

    def test_facility_param(self) -> None:
        self.client.get("/orders?facilityId=WH1")
        _, params = self.fake.cursors[-1].executed
        self.assertEqual(params, ["WH1"])

    def test_default_facility_from_env(self) -> None:
        with patch.dict(os.environ, {"ORDER_LIST_DEFAULT_FACILITY": "WH7"}):
            self.client.get("/orders")
        _, params = self.fake.cursors[-1].executed
        self.assertEqual(params, ["WH7"])

    def test_sessions_are_isolated(self) -> None:
        self.client.get("/orders?viewSize=10&viewIndex=2")
        other = self.app.test_client()
        payload = other.get("/orders").get_json()
        self.assertEqual(payload["view_index"], 0)
        self.assertEqual(len(self.store), 2)

    def test_storage_failure_returns_503(self) -> None:
        self.fake.error = psycopg.OperationalError("down")
        with self.assertLogs(level="ERROR"):
            response = self.client.get("/orders")
        self.assertEqual(response.status_code, 503)
        payload = response.get_json()
        self.assertIn("stage=open", payload["error"])
        self.assertNotIn("orders", payload)
        self.assertTrue(self.fake.cursors[-1].closed)


class TestStateRoutes(OrderRoutesTestCase):
    def test_state_snapshot_does_not_query(self) -> None:
        payload = self.client.get("/orders/state").get_json()
        self.assertEqual(payload["view_size"], 10)
        self.assertFalse(payload["has_previous"])
        self.assertFalse(payload["has_all_status"])
        self.assertEqual(self.fake.cursors, [])

    def test_reset_discards_state(self) -> None:
        self.client.get("/orders?viewSize=10&viewIndex=2")
        response = self.client.post("/orders/state/reset")
        self.assertTrue(response.get_json()["reset"])
        self.assertEqual(len(self.store), 0)
        payload = self.client.get("/orders/state").get_json()
        self.assertEqual(payload["view_index"], 0)

    def test_reset_without_state(self) -> None:
        self.assertFalse(self.client.post("/orders/state/reset").get_json()["reset"])


class TestAppFactory(unittest.TestCase):
    def test_requires_secret_key(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertLogs(app_module.logger, level="WARNING"):
                with self.assertRaises(RuntimeError):
                    app_module.create_app(load_env=False)

    def test_healthz(self) -> None:
        app = app_module.create_app(secret_key="test", load_env=False)
        response = app.test_client().get("/healthz")
        self.assertEqual(response.get_json()["status"], "ok")

    def test_cookie_and_proxy_settings(self) -> None:
        env = {
            "WEB_PORTAL_COOKIE_SECURE": "yes",
            "WEB_PORTAL_COOKIE_SAMESITE": "strict",
            "WEB_PORTAL_COOKIE_NAME": "orders",
            "WEB_PORTAL_TRUST_PROXY": "2",
        }
        with patch.dict(os.environ, env, clear=True):
            app = app_module.create_app(secret_key="test", load_env=False)
        self.assertTrue(app.config["SESSION_COOKIE_SECURE"])
        self.assertEqual(app.config["SESSION_COOKIE_SAMESITE"], "Strict")
        self.assertEqual(app.config["SESSION_COOKIE_NAME"], "orders")
        self.assertEqual(type(app.wsgi_app).__name__, "ProxyFix")

    def test_parse_proxy_count(self) -> None:
        self.assertEqual(app_module._parse_proxy_count("true"), 1)
        self.assertEqual(app_module._parse_proxy_count("3"), 3)
        self.assertEqual(app_module._parse_proxy_count("-2"), 0)
        self.assertEqual(app_module._parse_proxy_count("bogus"), 0)


if __name__ == "__main__":
    unittest.main()
