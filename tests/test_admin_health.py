import threading

import pytest

from receipt_printer import create_app
from receipt_printer.printing.job_queue import JobQueue


@pytest.fixture
def queue():
    return JobQueue()


@pytest.fixture
def app(queue):
    app = create_app(
        config_overrides={"ARCHIVE_ENABLED": False},
        job_queue=queue,
        printer_config={"printer_name": "Test TM"},
    )
    app.config.update(TESTING=True)
    return app


def test_health_reports_queue_and_printer(app):
    client = app.test_client()
    r = client.get("/health")
    assert r.status_code == 200
    body = r.get_json()
    assert body["status"] == "ok"
    assert body["service"] == "receipt-printer"
    assert body["printer"] == "Test TM"
    assert body["port"] == 3000
    assert body["accepting"] is True
    assert body["queue"] == {"length": 0, "printing": False}

    assert client.get("/healthz").get_json() == body


def test_health_reflects_busy_queue(app, queue):
    release = threading.Event()
    started = threading.Event()

    def slow():
        started.set()
        release.wait(5)

    queue.enqueue(slow)
    queue.enqueue(lambda: None)
    assert started.wait(5)
    try:
        body = app.test_client().get("/health").get_json()
        assert body["queue"] == {"length": 1, "printing": True}
    finally:
        release.set()
    assert queue.wait_idle(timeout=5)


def test_admin_status(app):
    r = app.test_client().get("/admin/status")
    assert r.status_code == 200
    assert r.get_json() == {"enabled": True, "queue": {"length": 0, "printing": False}}


def test_admin_page_sets_csrf_cookie(app, csrf_token):
    client = app.test_client()
    token = csrf_token(client)
    assert token
    r = client.get("/admin")
    assert "ENABLED" in r.get_data(as_text=True)


def test_admin_toggle_disables_and_enables(app, csrf_token):
    client = app.test_client()
    token = csrf_token(client)
    headers = {"X-CSRFToken": token}

    r = client.post("/admin/toggle", json={"enabled": False}, headers=headers)
    assert r.status_code == 200, r.get_data(as_text=True)
    assert r.get_json() == {"success": True, "enabled": False}
    assert client.get("/admin/status").get_json()["enabled"] is False
    assert client.post("/print", json={"text": "x"}).status_code == 403

    r = client.post("/admin/toggle", json={"enabled": True}, headers=headers)
    assert r.get_json() == {"success": True, "enabled": True}
    assert client.get("/health").get_json()["accepting"] is True


@pytest.mark.parametrize("payload", [{}, {"enabled": "false"}, {"enabled": 0}, {"enabled": None}])
def test_admin_toggle_requires_boolean(app, csrf_token, payload):
    client = app.test_client()
    token = csrf_token(client)
    r = client.post("/admin/toggle", json=payload, headers={"X-CSRFToken": token})
    assert r.status_code == 400
    assert r.get_json() == {"success": False, "message": "enabled field must be a boolean"}
    assert client.get("/admin/status").get_json()["enabled"] is True


def test_admin_toggle_requires_csrf_token(app):
    client = app.test_client()
    r = client.post("/admin/toggle", json={"enabled": False})
    assert r.status_code == 400
    assert client.get("/admin/status").get_json()["enabled"] is True
