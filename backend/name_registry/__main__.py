"""
Run the Name Registry with uvicorn.

    python -m name_registry
    name-registry            (console script)

Host and port come from Settings (HOST / PORT). If the datastore cannot be
opened, uvicorn aborts startup and exits with a non-zero status.
"""

import uvicorn

from name_registry.config import settings


def main() -> None:
    uvicorn.run(
        "name_registry.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
