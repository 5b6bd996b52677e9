"""SSE encoding helpers."""

from __future__ import annotations

import json

from mine_homologues.platform.types import JSONObject


def sse_event(event_type: str, data: JSONObject) -> str:
    return f"event: {event_type}\ndata: {json.dumps(data)}\n\n"


def sse_done() -> str:
    return sse_event("done", {})


def sse_error(problem: JSONObject) -> str:
    return sse_event("error", problem)
