"""JSON type aliases shared by the clients, events and HTTP payloads."""

from __future__ import annotations

from typing import TypeAlias

from pydantic import JsonValue

JSONValue: TypeAlias = JsonValue
JSONObject: TypeAlias = dict[str, JSONValue]
JSONArray: TypeAlias = list[JSONValue]
