"""
Run the server with default settings:

    python -m simapi.server
"""
import uvicorn

from simapi.server.config import get_settings


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "simapi.server:app",
        host=settings.host,
        port=settings.port,
    )
