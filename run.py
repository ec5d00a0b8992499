#!/usr/bin/env python3
"""
Fungible Ledger Entry Point

Starts the FastAPI server with the host and port from FUNGIBLE_* settings.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from fungible_ledger.api import run_server
from fungible_ledger.config import get_config


if __name__ == "__main__":
    config = get_config()

    print("Starting Fungible Ledger...")
    print(f"Storage backend: {config.storage_backend}")
    print(f"Amounts: {config.amount_kind}")
    print(f"Audit trail: {'active' if config.enable_audit_logging else 'disabled'}")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(
            host=config.api_host,
            port=config.api_port,
            debug=False  # Set to True for development
        )
    except KeyboardInterrupt:
        print("\nShutting down Fungible Ledger...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
