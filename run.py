"""Project root entry point for launching the HTTP interface."""

from __future__ import annotations

import os


def main():
    from langbly_sync.web import create_app

    app = create_app()
    app.run(
        host=os.environ.get("LANGBLY_HOST", "127.0.0.1"),
        port=int(os.environ.get("LANGBLY_PORT", "5500")),
        debug=os.environ.get("LANGBLY_DEBUG") == "1",
    )


if __name__ == "__main__":
    main()
