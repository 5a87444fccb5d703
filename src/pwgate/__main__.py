"""pwgate entrypoint.

Run with:
  python -m pwgate
"""

import os
import uvicorn

from pwgate.logging_config import get_logging_config

def main() -> None:
    host = os.getenv("PWGATE_HOST", "0.0.0.0")
    port = int(os.getenv("PWGATE_PORT", "8000"))
    reload = os.getenv("PWGATE_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    level = os.getenv("PWGATE_LOG_LEVEL", "INFO").upper()
    uvicorn.run("pwgate.app:app", host=host, port=port, reload=reload, log_config=get_logging_config(level))

if __name__ == "__main__":
    main()
