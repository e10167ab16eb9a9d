from unittest.mock import patch

import httpx
import pytest
from click.exceptions import Exit as ClickExit
from typer.testing import CliRunner

from app.cli.cli import app
from app.cli.commands import tags as tags_command

runner = CliRunner()

IMPORT_RESULT = {
    "tag_count": 1000,
    "pages_fetched": 10,
    "empty_pages": [],
    "imported_at": "2024-01-01T12:00:00Z",
    "duration_ms": 812.4,
    "is_empty": False,
}


def test_version_command():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "Tag Stats CLI version" in result.output


def test_import_prints_summary():
    with patch("app.cli.commands.tags._request", return_value=IMPORT_RESULT) as mock_request:
        result = runner.invoke(app, ["tags", "import", "--base-url", "http://svc/api/v1"])

    assert result.exit_code == 0
    assert "1000" in result.output
    assert "Import complete" in result.output
    mock_request.assert_called_once_with(
        "POST", "http://svc/api/v1", "/tags/import", timeout=tags_command.IMPORT_TIMEOUT_SECONDS
    )


def test_import_warns_on_empty_result():
    empty = dict(IMPORT_RESULT, tag_count=0, empty_pages=[1, 2], is_empty=True)
    with patch("app.cli.commands.tags._request", return_value=empty):
        result = runner.invoke(app, ["tags", "import"])

    assert result.exit_code == 0
    assert "snapshot is now empty" in result.output


def test_list_sends_query_parameters():
    payload = {"tags": [{"name": "sqlite", "percentage": 98.03922}]}
    with patch("app.cli.commands.tags._request", return_value=payload) as mock_request:
        result = runner.invoke(
            app,
            ["tags", "list", "-p", "2", "-s", "5", "--sort-by", "Percentage", "--order", "Desc"],
        )

    assert result.exit_code == 0
    assert "sqlite" in result.output
    assert "98.03922" in result.output
    _, kwargs = mock_request.call_args
    assert kwargs["params"] == {"pageNumber": 2, "pageSize": 5, "sortBy": "Percentage", "sortOrder": "Desc"}


def test_list_empty_page():
    with patch("app.cli.commands.tags._request", return_value={"tags": []}):
        result = runner.invoke(app, ["tags", "list"])

    assert result.exit_code == 0
    assert "No tags on this page." in result.output


def _patch_client(monkeypatch, handler):
    real_client = httpx.Client

    def client_factory(timeout):
        return real_client(transport=httpx.MockTransport(handler), timeout=timeout)

    monkeypatch.setattr(tags_command.httpx, "Client", client_factory)


def test_request_returns_json_body(monkeypatch):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tags": []})

    _patch_client(monkeypatch, handler)

    body = tags_command._request("GET", "http://svc/api/v1/", "/tags", timeout=1.0, params={"pageSize": 3})

    assert body == {"tags": []}
    assert str(seen[0].url) == "http://svc/api/v1/tags?pageSize=3"


def test_request_error_status_exits_with_code_1(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json={"error": "UpstreamUnavailableError", "message": "upstream down"})

    _patch_client(monkeypatch, handler)

    with pytest.raises(ClickExit) as exc_info:
        tags_command._request("POST", "http://svc/api/v1", "/tags/import", timeout=1.0)

    assert exc_info.value.exit_code == 1


def test_request_unreachable_service_exits_with_code_2(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _patch_client(monkeypatch, handler)

    with pytest.raises(ClickExit) as exc_info:
        tags_command._request("GET", "http://svc/api/v1", "/tags", timeout=1.0)

    assert exc_info.value.exit_code == 2
