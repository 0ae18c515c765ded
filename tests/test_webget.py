import io
import socket
import threading
from unittest import mock

import pytest

from sponge.webget import build_request, get_url, main

RESPONSE = b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\nConnection: close\r\n\r\nhello"


def _serve_once(response):
    """Start a one-shot HTTP-ish server on localhost; return (port, thread, received list)."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    port = listener.getsockname()[1]
    received = []

    def run():
        conn, _ = listener.accept()
        with conn:
            data = b""
            while b"\r\n\r\n" not in data:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                data += chunk
            received.append(data)
            conn.sendall(response)
        listener.close()

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return port, thread, received


def _fake_resolution(port):
    return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", port))]


def test_build_request_format():
    assert build_request("example.com", "/hello") == (
        b"GET /hello HTTP/1.1\r\nHost: example.com\r\nConnection: close\r\n\r\n"
    )


def test_build_request_ends_with_blank_line():
    request = build_request("example.com", "/")
    assert request.endswith(b"\r\n\r\n")
    assert request.startswith(b"GET / HTTP/1.1\r\n")


def test_get_url_sends_request_and_returns_reply():
    port, thread, received = _serve_once(RESPONSE)
    out = io.BytesIO()
    with mock.patch("socket.getaddrinfo", return_value=_fake_resolution(port)) as gai:
        reply = get_url("example.com", "/hello", out)
    thread.join(timeout=5)
    assert reply == RESPONSE
    assert out.getvalue() == RESPONSE
    assert received == [build_request("example.com", "/hello")]
    assert gai.call_args[0][:2] == ("example.com", "http")


def test_get_url_large_reply_read_completely():
    body = b"x" * 200_000
    response = b"HTTP/1.1 200 OK\r\n\r\n" + body
    port, thread, _ = _serve_once(response)
    out = io.BytesIO()
    with mock.patch("socket.getaddrinfo", return_value=_fake_resolution(port)):
        reply = get_url("example.com", "/big", out)
    thread.join(timeout=5)
    assert reply == response
    assert len(out.getvalue()) == len(response)


def test_main_writes_reply_to_stdout(capsysbinary):
    port, thread, _ = _serve_once(RESPONSE)
    with mock.patch("socket.getaddrinfo", return_value=_fake_resolution(port)):
        status = main(["example.com", "/hello"])
    thread.join(timeout=5)
    captured = capsysbinary.readouterr()
    assert status == 0
    assert captured.out == RESPONSE


@pytest.mark.parametrize("argv", [[], ["example.com"], ["example.com", "/", "extra"]])
def test_main_usage_on_wrong_argument_count(argv, capsys):
    assert main(argv) == 1
    err = capsys.readouterr().err
    assert "Usage: webget HOST PATH" in err
    assert "Example:" in err


def test_main_reports_resolution_failure(capsys):
    error = socket.gaierror(socket.EAI_NONAME, "Name or service not known")
    with mock.patch("socket.getaddrinfo", side_effect=error):
        status = main(["nonexistent.example.com", "/"])
    assert status == 1
    assert "getaddrinfo(nonexistent.example.com, http)" in capsys.readouterr().err


def test_get_url_raises_on_refused_connection():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    with mock.patch("socket.getaddrinfo", return_value=_fake_resolution(port)):
        with pytest.raises(ConnectionRefusedError):
            get_url("example.com", "/", io.BytesIO())