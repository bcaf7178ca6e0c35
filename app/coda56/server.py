"""
HTTP side of the exporter: a landing page on / and the exposition on /metrics.

prometheus_client's own start_http_server answers every path with metrics, so we put a small
WSGI app in front of its make_wsgi_app() and serve that instead.
"""

from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

import structlog
from prometheus_client import REGISTRY, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.registry import CollectorRegistry

log = structlog.get_logger(__name__)

METRICS_PATH = "/metrics"

LANDING_PAGE = b"""<html>
<head><title>Hitron CODA56 Exporter</title></head>
<body>
<h1>Hitron CODA56 Exporter</h1>
<p><a href="/metrics">Metrics</a></p>
</body>
</html>"""


def make_app(registry: CollectorRegistry = REGISTRY):
    """WSGI app: `registry` on /metrics, the landing page on every other path."""
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        if environ.get("PATH_INFO") == METRICS_PATH:
            return metrics_app(environ, start_response)

        start_response(
            "200 OK",
            [
                ("Content-Type", "text/html; charset=utf-8"),
                ("Content-Length", str(len(LANDING_PAGE))),
            ],
        )
        return [LANDING_PAGE]

    return app


class _LoggingHandler(WSGIRequestHandler):
    """wsgiref writes every request to stderr; send it through structlog at debug instead."""

    def log_message(self, format, *args):
        log.debug("HTTP request", client=self.address_string(), request=format % args)


def make_metrics_server(addr: str, port: int, registry: CollectorRegistry = REGISTRY) -> WSGIServer:
    """Bind (but don't start) a threaded server for make_app(registry)."""
    return make_server(
        addr,
        port,
        make_app(registry),
        server_class=ThreadingWSGIServer,
        handler_class=_LoggingHandler,
    )
