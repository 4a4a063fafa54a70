#!/usr/bin/env python3
"""The Inventor's Playbook — activation web app.

Launch: python3 run_playbook.py
Serves at http://0.0.0.0:8000 (or PORT env var)
"""

import os
import sys

import uvicorn

from playbook.config import HOST, PORT, SESSION_SECRET


def main():
    print("=" * 60)
    print("  The Inventor's Playbook")
    print("=" * 60)

    # Validate required env vars
    if not SESSION_SECRET:
        print("\n  ERROR: SESSION_SECRET is not set; sessions cannot be signed.")
        sys.exit(1)

    missing = [k for k in ("SUPABASE_URL", "SUPABASE_SERVICE_KEY") if not os.environ.get(k)]
    if missing:
        print("\n  WARNING: missing environment variables:")
        for key in missing:
            print(f"    {key}")
        print("  Continuing anyway for local development...\n")

    print(f"Starting server on {HOST}:{PORT}")
    print(f"\n  Gate:  http://{HOST}:{PORT}/")
    print(f"  Admin: http://{HOST}:{PORT}/admin-dashboard")
    print("  Press Ctrl+C to stop\n")

    from playbook.app import create_app
    app = create_app()
    uvicorn.run(app, host=HOST, port=PORT, log_level="info")


if __name__ == "__main__":
    main()
