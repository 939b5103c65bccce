"""Preventive maintenance generation endpoint (invoked by Vercel cron or on demand)."""

from http.server import BaseHTTPRequestHandler
from urllib.parse import parse_qs, urlparse
from typing import Any, Optional
import asyncio
import json

from src.services.task_generator import build_task_generator
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
_logger = get_structured_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def parse_horizon_months(query: dict, body: Any) -> Optional[int]:
    """
    Read ``horizonMonths`` from the query string or JSON body (query wins).

    Returns None when absent; raises ValueError when present but not a positive integer.
    """
    raw = None
    if query.get("horizonMonths"):
        raw = query["horizonMonths"][0]
    elif isinstance(body, dict) and body.get("horizonMonths") is not None:
        raw = body["horizonMonths"]

    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError("horizonMonths must be a positive integer")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValueError("horizonMonths must be a positive integer")
    if value < 1 or (isinstance(raw, float) and raw != value):
        raise ValueError("horizonMonths must be a positive integer")
    return value


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for preventive task generation."""

    def _send_json(self, status: int, payload: dict, correlation_id: Optional[str] = None) -> None:
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        for name, value in CORS_HEADERS.items():
            self.send_header(name, value)
        if correlation_id:
            self.send_header(LoggingConfig.LOG_CORRELATION_ID_HEADER, correlation_id)
        self.end_headers()
        self.wfile.write(json.dumps(payload).encode('utf-8'))

    def _read_body(self) -> Any:
        content_length = int(self.headers.get('Content-Length', 0) or 0)
        raw_body = self.rfile.read(content_length).decode('utf-8') if content_length > 0 else ""
        if not raw_body:
            return {}
        try:
            return json.loads(raw_body)
        except json.JSONDecodeError:
            return {}

    def _run_generation(self, query: dict) -> None:
        with correlation_context(self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER)) as correlation_id:
            try:
                horizon_months = parse_horizon_months(query, self._read_body())
            except ValueError as e:
                self._send_json(400, {"success": False, "error": str(e)}, correlation_id)
                return

            try:
                generator = build_task_generator()
            except Exception as e:
                _logger.error("Failed to initialize task generator", error=str(e), exc_info=True)
                self._send_json(500, {"success": False, "error": "service initialization failed"}, correlation_id)
                return

            try:
                summary = asyncio.run(generator.run_generation_pass(horizon_months=horizon_months))
            except Exception as e:
                _logger.error("Error in generate-preventive-tasks", error=str(e), exc_info=True)
                self._send_json(500, {"success": False, "error": str(e)}, correlation_id)
                return

            status = 200 if summary.success else 500
            self._send_json(status, summary.to_response(), correlation_id)

    def do_POST(self):
        """Run one generation pass."""
        self._run_generation(parse_qs(urlparse(self.path).query))

    def do_GET(self):
        """Health check, or run a pass when called as ``?run=1`` (Vercel cron issues GETs)."""
        query = parse_qs(urlparse(self.path).query)
        if query.get("run", [""])[0] in ("1", "true"):
            self._run_generation(query)
            return
        self._send_json(200, {"status": "ok", "endpoint": "maintenance/generate"})

    def do_OPTIONS(self):
        """CORS preflight."""
        self.send_response(200)
        for name, value in CORS_HEADERS.items():
            self.send_header(name, value)
        self.end_headers()
