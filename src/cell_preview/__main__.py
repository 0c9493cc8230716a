# -*- coding: utf-8 -*-
"""
Entry point to run the service via python -m cell_preview.
"""
import uvicorn

from cell_preview.config import settings


def main():
    """Start the Uvicorn server."""
    uvicorn.run(
        "cell_preview.api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
