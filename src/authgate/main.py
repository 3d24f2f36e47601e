"""Application entry point for AuthGate backend server."""

import sys

import structlog

from authgate.app import App
from authgate.config import load_config
from authgate.errors import ConfigurationError
from authgate.logging import setup_logging
from authgate.web.runner import run_server

logger = structlog.get_logger(__name__)


def main() -> None:
    try:
        config = load_config()
    except ConfigurationError as e:
        setup_logging(debug=False)
        logger.critical("configuration_error", error=str(e))
        sys.exit(1)

    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
