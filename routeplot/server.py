#!/usr/bin/env python3
"""
routeplot — Web API
Parses uploaded or pasted route data for a map front end.

Usage:
    routeplot-server                  # Start on port 8080
    routeplot-server --port 9000      # Custom port
"""

import argparse
import http.server
import json
import logging
import urllib.parse

from .formats import FORMAT_REGISTRY, SOFT_FULL_NAME, extract_routes
from .logging_config import configure
from .models import ErrorKind
from .projections import flatten_points, instructions_of, summary_of, waypoints_of

log = logging.getLogger("routeplot.server")

# Options a client may pass next to the text
EXTRACT_OPTIONS = (
    "only", "delimiter", "col_lat", "col_lon", "col_timestamp", "col_speed",
    "incoming", "outgoing",
)

_FAILURE_STATUS = {
    ErrorKind.EMPTY_INPUT: 400,
    ErrorKind.UNSUPPORTED_VERSION: 422,
    ErrorKind.EXHAUSTED: 422,
}


def build_result(routes, message):
    """Response body for a parsed input: all routes, plus display data of the first."""
    route = routes[0]
    summary = summary_of(route)
    return {
        "message": message,
        "routes": [r.to_dict() for r in routes],
        "points": [p.to_dict() for p in flatten_points(route)],
        "waypoints": [p.to_dict() for p in waypoints_of(route)],
        "instructions": [i.to_dict() for i in instructions_of(route)],
        "summary": summary.to_dict() if summary else None,
    }


class RoutePlotHandler(http.server.BaseHTTPRequestHandler):

    def do_GET(self):
        parsed = urllib.parse.urlparse(self.path)
        if parsed.path == "/api/formats":
            self._send_json({
                "input": [{"key": f.key, "name": f.name} for f in FORMAT_REGISTRY],
            })
        elif parsed.path == "/api/about":
            self._send_json({"name": SOFT_FULL_NAME})
        else:
            self.send_error(404)

    def do_POST(self):
        parsed = urllib.parse.urlparse(self.path)
        routes = {
            "/api/extract": self._handle_extract,
        }
        handler = routes.get(parsed.path)
        if handler:
            handler()
        else:
            self.send_error(404)

    def _read_body(self):
        length = int(self.headers.get("Content-Length", 0))
        return self.rfile.read(length)

    def _send_json(self, data, status=200):
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", len(body))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.end_headers()
        self.wfile.write(body)

    def _handle_extract(self):
        """Body is either the raw text, or JSON {"text": ..., <options>}."""
        try:
            raw = self._read_body().decode("utf-8-sig")
            opts = {}
            if "application/json" in self.headers.get("Content-Type", ""):
                body = json.loads(raw)
                text = body.get("text", "")
                opts = {k: body[k] for k in EXTRACT_OPTIONS if k in body}
            else:
                text = raw
        except (ValueError, AttributeError) as e:
            self._send_json({"error": f"Bad request: {e}"}, 400)
            return

        try:
            outcome = extract_routes(text, **opts)
        except Exception as e:
            log.exception("Extraction failed")
            self._send_json({"error": str(e)}, 500)
            return

        if not outcome.is_success:
            status = _FAILURE_STATUS.get(outcome.kind, 422)
            self._send_json({"error": outcome.message, "kind": outcome.kind.value}, status)
            return
        self._send_json(build_result(outcome.value, outcome.message))

    def do_OPTIONS(self):
        self.send_response(200)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def log_message(self, format, *args):
        log.info("%s - %s", self.address_string(), format % args)


def main(argv=None):
    parser = argparse.ArgumentParser(description=f"{SOFT_FULL_NAME} — Web API")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)
    configure("DEBUG" if args.verbose else "INFO")

    server = http.server.HTTPServer((args.host, args.port), RoutePlotHandler)
    log.info("%s listening on http://%s:%d (Ctrl+C to stop)", SOFT_FULL_NAME, args.host, args.port)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        log.info("Server stopped.")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
