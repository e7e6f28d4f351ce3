import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from service_a.app import create_app
from service_a.config import ServiceAConfig
from service_a.identity import CloudRunPlatform, IdentityTokenProvider


class FakeServiceB(BaseHTTPRequestHandler):
    def do_GET(self):
        self.server.seen.append(
            {
                "path": self.path,
                "cookie": self.headers.get("Cookie"),
                "authorization": self.headers.get("Authorization"),
            }
        )

        status, body, headers = self.server.reply
        payload = body.encode("utf-8")

        self.send_response(status)
        for name, value in headers.items():
            self.send_header(name, value)
        if status != 304:
            self.send_header("Content-Type", "text/plain")
            self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if status != 304:
            self.wfile.write(payload)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def service_b(monkeypatch):
    # Requests to the local server must not go through a proxy from the environment
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")

    server = ThreadingHTTPServer(("127.0.0.1", 0), FakeServiceB)
    server.reply = (200, "42", {})
    server.seen = []

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def client(service_b):
    config = ServiceAConfig(
        service_b_url=f"http://127.0.0.1:{service_b.server_port}",
        environment="Development",
    )
    provider = IdentityTokenProvider(CloudRunPlatform())
    return create_app(config, token_provider=provider).test_client()


class TestCallServiceBOverHttp:
    def test_should_relay_body_without_auth_outside_cloud_run(self, service_b, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == 'service-a received from service-b: "42"'
        assert service_b.seen == [{"path": "/RollDice", "cookie": None, "authorization": None}]

    def test_should_return_500_on_not_modified(self, service_b, client):
        service_b.reply = (304, "", {})

        response = client.get("/")

        assert response.status_code == 500
        body = response.get_data(as_text=True)
        assert body.startswith("Error communicating with service-b:")
        assert "304" in body

    def test_should_return_500_on_server_error(self, service_b, client):
        service_b.reply = (503, "unavailable", {})

        response = client.get("/")

        assert response.status_code == 500
        assert "503" in response.get_data(as_text=True)

    def test_should_not_carry_cookies_between_requests(self, service_b, client):
        service_b.reply = (200, "42", {"Set-Cookie": "GAESA=sticky-session; Path=/"})

        client.get("/")
        client.get("/")

        assert [seen["cookie"] for seen in service_b.seen] == [None, None]
