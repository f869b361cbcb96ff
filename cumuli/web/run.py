#!/usr/bin/env python3
"""
Startup script for the Cumuli web API
"""

from cumuli.exceptions import CumuliError
from cumuli.settings import load_settings
from cumuli.web import create_app


def main() -> None:
    settings = load_settings()
    app = create_app(settings)

    print("Starting Cumuli web API...")
    print(f"Graph endpoint: http://localhost:{settings.port}/api/graph?u=<users>")
    print(f"Debug mode: {'enabled' if settings.debug else 'disabled'}")

    try:
        app.run(debug=settings.debug, host=settings.host, port=settings.port, use_reloader=False)
    except KeyboardInterrupt:
        print("\nShutting down Cumuli web API...")


if __name__ == "__main__":
    try:
        main()
    except CumuliError as e:
        print(f"Error starting web API: {e.message}")
        if e.details:
            print(f"  {e.details}")
        raise SystemExit(1)
