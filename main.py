#!/usr/bin/env python3
"""Main entry point for the debate coordinator."""

import logging
import sys

from coordinator.config.settings import AppConfig, get_default_config


def setup_logging(level: str = "INFO"):
    """Configure logging for the coordinator."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def print_usage():
    """Print usage information for local development."""

    print("Debate Coordinator")
    print("=" * 40)
    print("Usage:")
    print("   python main.py           (starts the coordinator)")
    print("   python main.py --help")
    print()
    print("Configuration is read from coordinator_config.json")
    print("(override the path with COORDINATOR_CONFIG).")
    print("Environment: PORT, REDIS_URL, LEDGER_URL, ALLOWED_ORIGINS")
    print()


def start_server(config: AppConfig):
    """Start the FastAPI server."""
    import uvicorn

    from coordinator.web.api import create_app

    port = config.system.port

    print("Starting Debate Coordinator...")
    print(f"API Documentation: http://localhost:{port}/docs")
    print(f"Chat history: http://localhost:{port}/v1/api/chat/{{debate_id}}")
    print(f"WebSocket: ws://localhost:{port}/v1/ws/chat/{{debate_id}}")

    uvicorn.run(
        create_app(config),
        host=config.system.host,
        port=port,
        log_level=config.system.log_level.lower(),
        access_log=True,
    )


def main():
    """Main entry point."""
    if "--help" in sys.argv or "-h" in sys.argv:
        print_usage()
        return

    config = get_default_config()
    setup_logging(config.system.log_level)
    start_server(config)


if __name__ == "__main__":
    main()
