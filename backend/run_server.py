#!/usr/bin/env python
"""
Flask app launcher without debug reloader
"""
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Flush output immediately
os.environ['PYTHONUNBUFFERED'] = '1'

logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    stream=sys.stdout,
)

from app import app  # noqa: E402  (logging must be configured first)


def main():
    port = int(os.getenv('PORT', '5000'))
    print("\n" + "="*70, flush=True)
    print("StopFakeAI Backend API Server", flush=True)
    print("="*70, flush=True)
    print(f"\n✓ Starting API server on http://localhost:{port}", flush=True)
    print(f"✓ Endpoints available:", flush=True)
    print(f"  - POST /api/detect-text", flush=True)
    print(f"  - GET  /api/user/status", flush=True)
    print(f"\nPress CTRL+C to stop\n", flush=True)
    print("="*70 + "\n", flush=True)

    try:
        # Run without debug and without reloader
        app.run(
            host=os.getenv('HOST', '0.0.0.0'),
            port=port,
            debug=False,
            use_reloader=False,
            threaded=True
        )
    except Exception as e:
        print(f"ERROR: {e}", flush=True)
        import traceback
        traceback.print_exc()


if __name__ == '__main__':
    main()
