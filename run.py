#!/usr/bin/env python3
"""Flask Application Runner.

Usage:
    python run.py              # Development server on port 5123
    python run.py --port 8080  # Custom port
    flask --app festival_api run  # Alternative using Flask CLI
"""

import argparse
import logging

from dotenv import load_dotenv

from festival_api import create_app

load_dotenv()
app = create_app()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the Flask development server")
    parser.add_argument("--port", type=int, default=5123, help="Port to run on")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--debug", action="store_true", default=True, help="Enable debug mode")
    args = parser.parse_args()

    logging.basicConfig(
        level=app.config["FESTIVAL_CONFIG"].log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"\n🚀 Starting Festival Radar API")
    print(f"   URL: http://{args.host}:{args.port}/api/festivals")
    print(f"   Debug: {args.debug}\n")

    app.run(host=args.host, port=args.port, debug=args.debug)
