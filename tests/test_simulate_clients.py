import pytest
import requests
from fastapi.testclient import TestClient

from restaurant_service import simulate_clients
from restaurant_service.app.main import create_app

BASE = "http://testserver"


@pytest.fixture
def routed(monkeypatch, memory_storage):
    """Sends the simulator's HTTP calls to an in-process app."""
    client = TestClient(create_app(memory_storage))

    def fake_http(method, url, **kwargs):
        kwargs.pop("timeout", None)
        return client.request(method, url, **kwargs)

    monkeypatch.setattr(simulate_clients, "http", fake_http)
    return memory_storage


def test_simulated_clients_succeed(routed):
    reports = simulate_clients.simulate_clients(BASE, clients=3)

    assert [report.client for report in reports] == [1, 2, 3]
    assert all(report.success for report in reports)
    assert [step.name for step in reports[0].steps] == [
        "Add orders", "Get all orders", "Get specific order", "Delete order",
    ]
    # Each client deleted one of its two orders.
    for table_id in (1, 2, 3):
        [order] = routed.list_orders(table_id)
        assert order.menu_item == "Pizza"
    assert simulate_clients.summary(reports) == {"clients": 3, "passed": 3, "failed": 0}


def test_main_exit_code(routed, monkeypatch):
    monkeypatch.setattr(simulate_clients, "RESTAURANT_BASE", BASE)
    monkeypatch.setattr(simulate_clients, "CLIENTS", 2)
    assert simulate_clients.main() == 0


def test_failed_step_is_reported(routed):
    # Table 0 is rejected by the service.
    report = simulate_clients.run_client(BASE, 0)
    assert not report.success
    assert report.steps[0].status_code == 422


def test_wait_for_server_gives_up(monkeypatch):
    def refuse(method, url, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(simulate_clients, "http", refuse)
    assert simulate_clients.wait_for_server(BASE, attempts=2, interval=0) is False


def test_no_clients_is_an_empty_run():
    reports = simulate_clients.simulate_clients(BASE, clients=0)
    assert reports == []
    assert simulate_clients.summary(reports) == {"clients": 0, "passed": 0, "failed": 0}
