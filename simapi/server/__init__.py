"""
Simulation HTTP API Server.

Usage:
    # Start server
    uvicorn simapi.server:app

    # Or programmatically
    from simapi.server import app, create_app

    # Custom configuration
    app = create_app()
"""

from simapi.server.app import app, create_app

__all__ = ["app", "create_app"]
