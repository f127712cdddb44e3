"""
Entry point — start the focus planner API.

Usage:
    python -m focusplan.main
    uvicorn focusplan.api.app:app --host 127.0.0.1 --port 8765 --reload
"""

import uvicorn
from .config import config


def main():
    uvicorn.run(
        "focusplan.api.app:app",
        host=config.api_host,
        port=config.api_port,
        reload=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
