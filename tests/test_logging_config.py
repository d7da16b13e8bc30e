"""Log masking and JSON output."""
import json
import logging

from app.logging_config import JSONFormatter, mask_pii, request_id_ctx


def test_mask_pii_redacts_secrets_and_emails():
    text = 'api_key="abc123" sent by jane.doe@example.com using sk-proj_ABCDEFGHIJKLMNOP'
    masked = mask_pii(text)
    assert 'api_key="***"' in masked
    assert "j***e@example.com" in masked
    assert "sk-***" in masked
    assert "ABCDEFGHIJKLMNOP" not in masked


def test_json_formatter_includes_context_and_extras():
    record = logging.LogRecord("devflowhub.analytics", logging.INFO, __file__, 1, "event %s", ("Hero_Variant_A_View",), None)
    record.event = "Hero_Variant_A_View"

    token = request_id_ctx.set("req-1")
    try:
        entry = json.loads(JSONFormatter().format(record))
    finally:
        request_id_ctx.reset(token)

    assert entry["message"] == "event Hero_Variant_A_View"
    assert entry["request_id"] == "req-1"
    assert entry["extra"] == {"event": "Hero_Variant_A_View"}
    assert "user_id" not in entry
