"""
Name Registry - Landing Page & Static Assets
=============================================

What:  Serves the browser front end: GET / returns index.html, and any other
       file in the static directory is served from the root path.
When:  mount_static() must run after every API router is included, because
       the catch-all mount at "/" only sees paths no route has claimed.
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles


def mount_static(app: FastAPI, static_dir: Path) -> None:
    """Serve `static_dir` from the same FastAPI app, with index.html at /."""

    static_dir = static_dir.resolve()
    index_html = static_dir / "index.html"

    if not index_html.exists():
        raise FileNotFoundError(f"Landing page not found. Expected {index_html}.")

    @app.get("/", include_in_schema=False)
    async def landing_page() -> FileResponse:
        return FileResponse(str(index_html))

    app.mount("/", StaticFiles(directory=str(static_dir)), name="static")
