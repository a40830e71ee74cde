# sends the weather request once and prints how many entries came back, or the error

from __future__ import annotations
import logging
import os
import sys
from .client import Session
from .service import describe, get_weather

def _log_level() -> int:
    # unknown names fall back to WARNING instead of failing before the request
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "WARNING").strip().upper())
    return level if isinstance(level, int) else logging.WARNING

def main() -> int:
    logging.basicConfig(
        level=_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    with Session() as session:
        # the completion runs on a worker thread, the future lets the cli wait for it
        future = get_weather(session, lambda result: print(describe(result)))
        result = future.result()
    return 0 if result.ok else 1

if __name__ == "__main__":
    sys.exit(main())
