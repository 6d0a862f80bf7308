# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Server entry point.

Run with `trainingdesk-api` or `uvicorn trainingdesk.main:app`.
"""

import uvicorn

from trainingdesk.api.app import create_app
from trainingdesk.core.config import get_settings

app = create_app()


def run() -> None:
    """Start uvicorn with the API settings."""
    settings = get_settings()
    uvicorn.run(
        "trainingdesk.main:app",
        host=settings.api.host,
        port=settings.api.port,
        workers=1 if settings.api.reload else settings.api.workers,
        reload=settings.api.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
