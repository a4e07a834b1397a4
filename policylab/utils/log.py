from __future__ import annotations
import json, logging, sys
from datetime import datetime
from typing import Any, Dict
import pytz

from .time import iso_utc

_RESERVED = (
    "name", "msg", "args", "levelname", "levelno",
    "pathname", "filename", "module", "exc_info",
    "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread",
    "threadName", "processName", "process", "taskName",
)

class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            # same stamp format as compiledAt
            "time": iso_utc(datetime.fromtimestamp(record.created, pytz.utc)),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # attach extra if present
        for k, v in getattr(record, "__dict__", {}).items():
            if k not in _RESERVED and k not in payload:
                payload[k] = v
        return json.dumps(payload, separators=(",", ":"), default=str)

def get_logger(name: str = "policylab", level: str = "INFO", structured_json: bool = True) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler(sys.stdout)
    if structured_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger

def logger_from_config(root_cfg, name: str = "policylab") -> logging.Logger:
    lc = root_cfg.logging
    return get_logger(name, level=lc.level, structured_json=lc.structured_json)
