"""Local dev entrypoint for the Pressroom API."""

from __future__ import annotations

import os
import sys
from pathlib import Path


def _ensure_src_on_path() -> None:
    backend_dir = Path(__file__).resolve().parent
    src_dir = backend_dir / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


if __name__ == "__main__":
    _ensure_src_on_path()

    import uvicorn

    from pressroom.core.config import configure_logging

    log_level = os.environ.get("PRESSROOM_LOG_LEVEL", "info")
    configure_logging(log_level)

    uvicorn.run(
        "pressroom.api:app",
        host="127.0.0.1",
        port=int(os.environ.get("PRESSROOM_PORT", "8000")),
        reload=True,
        log_level=log_level.lower(),
    )
