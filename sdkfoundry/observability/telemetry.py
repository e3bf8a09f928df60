"""Append-only JSON Lines record of tool invocations."""

from __future__ import annotations
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

MAX_PARAM_LENGTH = 500
TRUNCATION_SUFFIX = "... (truncated)"


def sanitize_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Truncate long string parameters such as pasted code."""
    sanitized: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        if isinstance(value, str) and len(value) > MAX_PARAM_LENGTH:
            sanitized[key] = value[:MAX_PARAM_LENGTH] + TRUNCATION_SUFFIX
        else:
            sanitized[key] = value
    return sanitized


class TelemetrySink:
    """Writes one line per tool call. Write failures never reach the caller."""

    def __init__(self, path: Union[str, Path], enabled: bool = True):
        self.path = Path(path)
        self.enabled = enabled

    def record(self, tool: str, params: Optional[Dict[str, Any]] = None) -> bool:
        if not self.enabled:
            return False

        event = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "tool": tool,
            "params": sanitize_params(params),
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(event, default=str) + "\n")
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Telemetry logging failed: {e}")
            return False

        return True
