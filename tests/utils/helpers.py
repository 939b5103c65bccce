"""Test helper functions."""

import json
from http.client import HTTPMessage
from io import BytesIO
from typing import Any, Dict, Optional
from unittest.mock import MagicMock, Mock


def mock_query_chain(data: Any = None, execute_side_effect: Any = None) -> MagicMock:
    """
    A Supabase/PostgREST builder mock: every chained call returns the same mock.

    ``execute()`` returns an object with ``.data`` unless a side effect is given.
    """
    query = MagicMock()
    for method in ("select", "eq", "lte", "gte", "in_", "contains", "order", "limit",
                   "insert", "update", "delete", "is_"):
        getattr(query, method).return_value = query
    if execute_side_effect is not None:
        query.execute.side_effect = execute_side_effect
    else:
        query.execute.return_value = MagicMock(data=data if data is not None else [])
    return query


def mock_supabase_context(client_class: MagicMock, query: MagicMock) -> MagicMock:
    """Wire a patched SupabaseClient class so ``async with`` yields a client whose tables return ``query``."""
    client = MagicMock()
    client.table.return_value = query
    client_class.return_value.__aenter__.return_value = client
    client_class.return_value.__aexit__.return_value = None
    return client


def create_handler(
    handler_cls,
    method: str = "POST",
    path: str = "/api/maintenance/generate",
    body: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
):
    """Build a BaseHTTPRequestHandler instance without a socket and with response calls mocked."""
    raw = json.dumps(body).encode('utf-8') if body is not None else b""
    message = HTTPMessage()
    for name, value in (headers or {}).items():
        message[name] = value
    if raw:
        message["Content-Length"] = str(len(raw))

    h = handler_cls.__new__(handler_cls)
    h.command = method
    h.path = path
    h.request_version = "HTTP/1.1"
    h.headers = message
    h.rfile = BytesIO(raw)
    h.wfile = BytesIO()
    h.send_response = Mock()
    h.send_header = Mock()
    h.end_headers = Mock()
    return h


def read_json_response(h) -> Dict[str, Any]:
    h.wfile.seek(0)
    return json.loads(h.wfile.read().decode('utf-8'))


def sent_headers(h) -> Dict[str, str]:
    return {c.args[0]: c.args[1] for c in h.send_header.call_args_list}
