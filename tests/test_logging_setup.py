import json
import logging

from price_feed.logging_setup import REQUEST_ID_CONTEXT, JsonFormatter, RequestIdFilter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("price_feed.candles", logging.INFO, __file__, 10, "candles_resolved %s", ("symbol=EUR/USD",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_nests_extra_context():
    payload = json.loads(JsonFormatter().format(_record(symbol="EUR/USD", bars=50)))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "price_feed.candles"
    assert payload["message"] == "candles_resolved symbol=EUR/USD"
    assert payload["ctx"] == {"symbol": "EUR/USD", "bars": 50}
    assert "request_id" not in payload


def test_request_id_filter_stamps_context_value():
    token = REQUEST_ID_CONTEXT.set("req-7")
    try:
        record = _record()
        assert RequestIdFilter().filter(record) is True
    finally:
        REQUEST_ID_CONTEXT.reset(token)

    payload = json.loads(JsonFormatter().format(record))
    assert payload["request_id"] == "req-7"
    assert "ctx" not in payload
