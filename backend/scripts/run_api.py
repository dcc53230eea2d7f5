"""Serve the API with uvicorn.

Bind address comes from `API_HOST` / `API_PORT` (default 0.0.0.0:8080);
everything else is read by `blogapi.config.Settings`.
"""

import os

import uvicorn


def main() -> None:
    host = os.environ.get("API_HOST", "0.0.0.0")
    port = int(os.environ.get("API_PORT", "8080"))
    uvicorn.run("blogapi.main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
