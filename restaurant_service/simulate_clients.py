#!/usr/bin/env python3
"""
Concurrent client simulation against the restaurant table orders service.

Each simulated waiter serves its own table: places two orders, lists the
table, fetches the first new order and deletes the last one.

Run:
  python -m restaurant_service.simulate_clients

Optional env:
  RESTAURANT_BASE=http://localhost:8000
  CLIENTS=5
  WAIT_ATTEMPTS=60
  DEBUG=1
"""

from __future__ import annotations

import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List

import requests


# =========================
# Terminal output
# =========================

RESET = "\033[0m"
COLOURS = {"info": "\033[96m", "warn": "\033[93m", "ok": "\033[92m", "fail": "\033[91m", "debug": "\033[90m"}
MARKS = {"info": "ℹ", "warn": "⚠", "ok": "✔", "fail": "✘", "debug": "…"}


def say(kind: str, msg: str):
    print(f"{COLOURS[kind]}{MARKS[kind]} {msg}{RESET}")


def info(msg: str):
    say("info", msg)


def warn(msg: str):
    say("warn", msg)


def ok(msg: str):
    say("ok", msg)


def fail(msg: str):
    say("fail", msg)


# =========================
# Config
# =========================

RESTAURANT_BASE = os.getenv("RESTAURANT_BASE", "http://localhost:8000")
CLIENTS = int(os.getenv("CLIENTS", "5"))
WAIT_ATTEMPTS = int(os.getenv("WAIT_ATTEMPTS", "60"))
DEBUG = os.getenv("DEBUG", "0").strip() in {"1", "true", "True", "YES", "yes"}

ORDERS_PATH = "/tables/{table_id}/orders"
ORDER_PATH = "/tables/{table_id}/orders/{order_id}"

MENU = ["Pizza", "Salad"]


def debug(msg: str):
    if DEBUG:
        say("debug", msg)


# =========================
# Models
# =========================

@dataclass
class StepResult:
    name: str
    status_code: int
    success: bool


@dataclass
class ClientReport:
    client: int
    steps: List[StepResult] = field(default_factory=list)
    error: str = ""

    @property
    def success(self) -> bool:
        return not self.error and all(step.success for step in self.steps)


# =========================
# HTTP helpers
# =========================

def http(method: str, url: str, **kwargs) -> requests.Response:
    kwargs.setdefault("timeout", 8)
    debug(f"{method} {url} kwargs={kwargs}")
    return requests.request(method, url, **kwargs)


def wait_for_server(base_url: str, attempts: int = WAIT_ATTEMPTS, interval: float = 1.0) -> bool:
    for attempt in range(1, attempts + 1):
        try:
            resp = http("GET", base_url + "/")
            if resp.status_code == 200:
                ok("Server is ready!")
                return True
        except requests.exceptions.RequestException as e:
            debug(f"server not ready: {e}")
        warn(f"Server not ready, waiting... (Attempt {attempt})")
        time.sleep(interval)
    fail(f"Server failed to start after {attempts} attempts")
    return False


def _record(report: ClientReport, name: str, resp: requests.Response) -> bool:
    success = resp.status_code == 200
    report.steps.append(StepResult(name, resp.status_code, success))
    print(f"Client {report.client} - {name} status: {resp.status_code}")
    return success


# =========================
# Simulation
# =========================

def run_client(base_url: str, client: int) -> ClientReport:
    """One waiter serving table number `client`."""
    report = ClientReport(client=client)
    table_id = client
    print(f"Client {client} started")
    try:
        resp = http(
            "POST",
            base_url + ORDERS_PATH.format(table_id=table_id),
            json={"orders": [{"menu_item": item} for item in MENU]},
        )
        if not _record(report, "Add orders", resp):
            return report
        order_ids: List[str] = resp.json()

        resp = http("GET", base_url + ORDERS_PATH.format(table_id=table_id))
        _record(report, "Get all orders", resp)

        if order_ids:
            resp = http("GET", base_url + ORDER_PATH.format(table_id=table_id, order_id=order_ids[0]))
            _record(report, "Get specific order", resp)

            resp = http("DELETE", base_url + ORDER_PATH.format(table_id=table_id, order_id=order_ids[-1]))
            _record(report, "Delete order", resp)
    except requests.exceptions.RequestException as e:
        report.error = str(e)
        fail(f"Client {client} - Error: {e}")
    finally:
        print(f"Client {client} finished")
    return report


def simulate_clients(base_url: str, clients: int = CLIENTS) -> List[ClientReport]:
    if clients < 1:
        return []
    with ThreadPoolExecutor(max_workers=clients) as pool:
        futures = [pool.submit(run_client, base_url, i) for i in range(1, clients + 1)]
        return [future.result() for future in futures]


def summary(reports: List[ClientReport]) -> Dict[str, Any]:
    passed = sum(1 for report in reports if report.success)
    return {"clients": len(reports), "passed": passed, "failed": len(reports) - passed}


def main() -> int:
    print("\n== Restaurant table orders: client simulation ==\n")
    info(f"Target: {RESTAURANT_BASE}, clients: {CLIENTS}")
    if not wait_for_server(RESTAURANT_BASE):
        return 1

    reports = simulate_clients(RESTAURANT_BASE, CLIENTS)
    totals = summary(reports)
    print()
    if totals["failed"]:
        fail(f"{totals['failed']} of {totals['clients']} clients saw a failing step")
        for report in reports:
            if not report.success:
                failed = [f"{step.name}={step.status_code}" for step in report.steps if not step.success]
                fail(f"Client {report.client}: {report.error or ', '.join(failed)}")
        return 1
    ok(f"All {totals['clients']} clients completed every step")
    return 0


if __name__ == "__main__":
    sys.exit(main())
