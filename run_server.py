#!/usr/bin/env python3
"""
Run the Brainstorm Canvas server.

Usage:
    python run_server.py
    python run_server.py --port 8080
    python run_server.py --storage-file workshop.json --local-fallback

Environment variables (also read from a .env file):
    BRAINSTORM_STORAGE_FILE: Path to the storage file (default: brainstorm.json)
    HOST: Server host (default: 0.0.0.0)
    PORT: Server port (default: 8000)
    API_PREFIX: REST API prefix (default: /api)
    EXPANSION_URL: Base URL of the suggestion server (default: this server)
    LOCAL_FALLBACK: Use local suggestions when the remote call fails (default: false)
    LOG_LEVEL: Logging level (default: INFO)
"""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from brainstorm.api_host import create_app, AppConfig  # noqa: E402


def parse_args(config: AppConfig):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Run the Brainstorm Canvas server"
    )
    parser.add_argument(
        "--host",
        default=config.host,
        help=f"Host to bind to (default: {config.host})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.port,
        help=f"Port to bind to (default: {config.port})"
    )
    parser.add_argument(
        "--storage-file",
        default=config.storage_file,
        help=f"Path to the storage file (default: {config.storage_file})"
    )
    parser.add_argument(
        "--expansion-url",
        default=config.expansion_url,
        help="Base URL of the suggestion server (default: this server's own endpoint)"
    )
    parser.add_argument(
        "--local-fallback",
        action="store_true",
        default=config.local_fallback,
        help="Use local suggestions when the expansion request fails"
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        help=f"Logging level (default: {config.log_level})"
    )
    return parser.parse_args()


def main():
    """Main entry point."""
    config = AppConfig.from_env()
    args = parse_args(config)

    config.host = args.host
    config.port = args.port
    config.storage_file = args.storage_file
    config.expansion_url = args.expansion_url
    config.local_fallback = args.local_fallback
    config.log_level = args.log_level

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("Brainstorm Canvas Server")
    print("=" * 60)
    print(f"Storage file: {config.get_storage_path()}")
    print(f"Host: {config.host}")
    print(f"Port: {config.port}")
    print(f"API prefix: {config.api_prefix}")
    print(f"Expansion: {config.get_expansion_url()}{config.expansion_path}")
    print(f"Local fallback: {config.local_fallback}")
    print("=" * 60)
    print()

    app = create_app(config)

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
