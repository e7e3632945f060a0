#!/usr/bin/env python3
"""
Start the Metroscore ranking API with uvicorn.
"""

import subprocess
import sys
import os


def main():
    root_dir = os.path.dirname(os.path.abspath(__file__))
    port = os.environ.get("METROSCORE_PORT", "8001")

    print("Starting Metroscore ranking API...")
    print(f"Project directory: {root_dir}")

    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "apps.api:create_app",
            "--factory",
            "--host", "0.0.0.0",
            "--port", port,
            "--reload"
        ], cwd=root_dir, check=False)
    except KeyboardInterrupt:
        print("\nShutting down API server...")


if __name__ == "__main__":
    main()
