from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "bot_id",
    "chat_id",
    "message_id",
    "chat_type",
    "emoji",
    "delay_ms",
    "action",
    "decision",
    "reason",
    "query_id",
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for extra_key in _EXTRA_KEYS:
            value = getattr(record, extra_key, None)
            if value is not None:
                payload[extra_key] = value
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.handlers.clear()
    root.addHandler(handler)
    # one access line per webhook hit; only kept when debugging
    access_level = logging.DEBUG if root.level <= logging.DEBUG else logging.WARNING
    logging.getLogger("aiohttp.access").setLevel(access_level)
