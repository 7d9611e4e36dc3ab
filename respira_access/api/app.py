"""
Flask application factory and server entry-point.
"""

import os
import sys
import traceback

from flask import Flask
from flask_cors import CORS

from respira_access.address import ViaCepLookup
from respira_access.config import TOKEN_EXPIRY_HOURS, VIACEP_URL
from respira_access.database import init_engine
from respira_access.api.routes import register_routes


def create_app(engine=None, address_lookup=None):
    """Build and return a fully configured Flask application."""
    app = Flask(__name__)
    CORS(app)

    # ── Initialise shared resources ──────────────────────────────────
    try:
        if engine is None:
            print("[init] Initializing database connection...")
            engine = init_engine()
        if address_lookup is None:
            print(f"[init] Using ViaCEP at {VIACEP_URL}")
            address_lookup = ViaCepLookup()
        print("[init] ✓ API server ready")
    except Exception as e:
        print(f"[FATAL] Failed to initialize: {e}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)

    app.config["IDENTITY_ENGINE"] = engine

    # ── Register routes ──────────────────────────────────────────────
    register_routes(app, engine, address_lookup)

    return app


def main():
    """Run the development server."""
    print("=" * 60)
    print("Respira Access – REST API Server")
    print("=" * 60)

    app = create_app()

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    debug = os.getenv("FLASK_ENV") == "development"

    print(f"\n[server] Starting Flask API on {host}:{port}")
    print(f"[server] Debug mode: {debug}")
    print(f"[server] CORS enabled: True")
    print(f"[server] Session expiry: {TOKEN_EXPIRY_HOURS} hours")
    print("\nAPI Endpoints:")
    print(f"  - POST http://{host}:{port}/api/auth/token")
    print(f"  - POST http://{host}:{port}/api/auth/logout")
    print(f"  - GET  http://{host}:{port}/api/me/access")
    print(f"  - GET  http://{host}:{port}/api/me/dashboard")
    print(f"  - POST http://{host}:{port}/api/validate/<kind>")
    print(f"  - GET  http://{host}:{port}/api/cep/<cep>")
    print(f"  - GET  http://{host}:{port}/health")
    print("\n" + "=" * 60)

    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
