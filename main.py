"""Gossip World dev launcher. Starts the backend in watch mode."""

import argparse
import logging
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

from backend.logs import configure_logging

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def main():
    parser = argparse.ArgumentParser(description="Gossip World dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--demo", action="store_true",
                        help="Clean and create demo humans, rooms and chat")
    args = parser.parse_args()
    configure_logging()

    data_dir = args.data_dir or ROOT / "data"
    if args.demo:
        from backend.demo import create_demo_data
        create_demo_data(data_dir)
        logging.getLogger(__name__).info("Demo data written to %s", data_dir)

    # Build env for the subprocess so the backend picks up the same data dir
    env = os.environ.copy()
    env["DATA_DIR"] = str(data_dir.resolve())

    print(f"Starting backend on http://localhost:{PORT} ...")
    proc = subprocess.Popen(
        ["uv", "run", "uvicorn", "backend.app:app", "--reload",
         "--host", HOST, "--port", PORT, "--log-level", LOG_LEVEL.lower()],
        cwd=ROOT, env=env,
    )

    def shutdown(*_):
        print("\nShutting down...")
        proc.terminate()
        proc.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    proc.wait()


if __name__ == "__main__":
    main()
