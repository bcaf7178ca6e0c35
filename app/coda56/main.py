#!/usr/bin/env python3
"""
Main / entry point for the Hitron CODA56 modem exporter.

"""
from os import getenv

import structlog
from coda56.client import ModemClient
from coda56.collector import ModemCollector
from coda56.scrape import SnapshotAggregator
from coda56.server import make_metrics_server
from coda56.util.const import LogLevel
from prometheus_client import REGISTRY

# cfg-file/arg-arse/clip is overkill for the few things that need to be configured.
# k8s makes it trivial to define env-vars so we'll just use that.
##
MODEM_BASE_URL = getenv("MODEM_BASE_URL", "https://192.168.100.1")

METRICS_ADDR = getenv("METRICS_ADDR", "0.0.0.0")
METRICS_PORT = int(getenv("METRICS_PORT", "2632"))

# The modem is polled when /metrics is scraped so there's no poll interval here; that's
#   whatever scrape_interval prometheus is configured with.
REQUEST_TIMEOUT_SECONDS = float(getenv("REQUEST_TIMEOUT_SECONDS", "10"))


if getenv("LOG_LEVEL") not in LogLevel.__members__ or getenv("LOG_LEVEL") is None:
    print(f"Defaulting to {LogLevel.INFO} log level")
    log_level = LogLevel.INFO
else:
    log_level = LogLevel[getenv("LOG_LEVEL")]  # type: ignore
    print(f"Using log level {log_level.value}")


structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(log_level.value)
)

log = structlog.get_logger(__name__)


def main():
    """Main entry point."""
    log.info(
        "Starting up",
        modem=MODEM_BASE_URL,
        timeout=REQUEST_TIMEOUT_SECONDS,
    )

    client = ModemClient(MODEM_BASE_URL, REQUEST_TIMEOUT_SECONDS)
    REGISTRY.register(ModemCollector(SnapshotAggregator(client)))

    # Metrics live on /metrics only; every other path gets a small landing page.
    # Failing to bind is the only thing that should take the process down; let it raise.
    server = make_metrics_server(METRICS_ADDR, METRICS_PORT)
    log.info("Metrics server started", server=server.server_address)
    server.serve_forever()


if __name__ == "__main__":
    main()
