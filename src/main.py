# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Server entry point.

Runs the API under uvicorn with the host, port and worker settings from
the API_* environment variables:

    scheduler-api
    # or
    uvicorn src.api.app:create_app --factory
"""

import uvicorn

from src.core.config import get_settings


def main() -> None:
    """Start the API server."""
    settings = get_settings()
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers,
        reload=settings.api.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
