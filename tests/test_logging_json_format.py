import io
import json
from contextlib import contextmanager, redirect_stderr, redirect_stdout

from fastapi.testclient import TestClient

from namenest.config import settings
from namenest.logging import _sanitize_event_dict, configure_logging, logger
from namenest.main import create_app


@contextmanager
def _captured_output():
    """stdout/stderr の両方を捕捉する（logging は既定で stderr に出力する）。"""

    buf_out = io.StringIO()
    buf_err = io.StringIO()
    with redirect_stdout(buf_out), redirect_stderr(buf_err):
        yield buf_out, buf_err


def _log_lines(buf_out: io.StringIO, buf_err: io.StringIO) -> list[str]:
    raw = buf_err.getvalue().strip() or buf_out.getvalue().strip()
    return [ln for ln in raw.splitlines() if ln.strip()]


def _request_complete_lines(lines: list[str]) -> list[str]:
    return [ln for ln in lines if '"event": "request_complete"' in ln]


def test_structlog_outputs_pure_json_without_stdlib_prefix():
    with _captured_output() as (buf_out, buf_err):
        configure_logging()
        logger.info(
            "name_generation_attempt",
            model="model-a",
            candidate_index=0,
            attempt=1,
        )

    lines = _log_lines(buf_out, buf_err)
    assert lines, "no log output captured"
    message_text = lines[-1]
    assert not message_text.startswith("INFO:"), message_text

    data = json.loads(message_text)
    assert data.get("event") == "name_generation_attempt"
    assert data.get("level") in {"info", "INFO"}
    assert data.get("model") == "model-a"
    assert "timestamp" in data


def test_request_complete_log_contains_request_id_and_status():
    with _captured_output() as (buf_out, buf_err):
        client = TestClient(create_app())
        response = client.get("/healthz", headers={"X-Request-ID": "req-123"})
        assert response.status_code == 200

    request_lines = _request_complete_lines(_log_lines(buf_out, buf_err))
    assert request_lines, "request_complete log line not found"

    data = json.loads(request_lines[-1])
    assert data.get("request_id") == "req-123"
    assert data.get("status_code") == 200
    assert data.get("path") == "/healthz"
    assert response.headers["X-Request-ID"] == "req-123"


def test_request_log_records_error_context():
    """失敗リクエストでも構造化ログへエラー要約を残す。"""

    with _captured_output() as (buf_out, buf_err):
        app = create_app()

        @app.get("/boom")
        async def boom() -> None:  # pragma: no cover - 呼び出し側で検証
            raise RuntimeError("intentional failure")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/boom")
        assert response.status_code == 500

    request_lines = _request_complete_lines(_log_lines(buf_out, buf_err))
    assert request_lines, "request_complete log line not found"

    data = json.loads(request_lines[-1])
    assert data.get("status_code") == 500
    assert data.get("error_type") == "RuntimeError"
    assert "intentional failure" in data.get("error_message", "")


def test_sensitive_values_are_masked_in_logs(monkeypatch):
    secret = "hf_abcdefghijklmnop1234"
    monkeypatch.setattr(settings, "hf_api_token", secret)

    with _captured_output() as (buf_out, buf_err):
        configure_logging()
        logger.info(
            "config_dump",
            hf_api_token=secret,
            nested={"authorization": f"Bearer {secret}", "note": f"using {secret} now"},
        )

    lines = _log_lines(buf_out, buf_err)
    assert lines, "log output missing"
    message_text = lines[-1]
    assert secret not in message_text

    data = json.loads(message_text)
    assert data["hf_api_token"] == "hf_a…1234"
    assert data["nested"]["note"].startswith("using hf_a")


def test_sanitize_event_dict_masks_known_token_inside_plain_fields(monkeypatch):
    secret = "hf_zyxwvutsrqponm9876"
    monkeypatch.setattr(settings, "hf_api_token", secret)

    event = _sanitize_event_dict(
        None,
        "info",
        {"event": "llm_complete_error", "error": f"401 for token {secret}", "status": 401},
    )
    assert secret not in event["error"]
    assert event["status"] == 401

    # 短い値はキー名だけで伏せ字にする
    assert _sanitize_event_dict(None, "info", {"api_key": "short"})["api_key"] == "***"
