"""
Entrypoint for running the API in development.
In production run create_app() behind a WSGI server (gunicorn/uwsgi).
"""
import os
from . import create_app

# Respect APP_ENV for configuration selection (handled in get_config())
app = create_app()

if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    app.run(host=host, port=port, debug=app.config.get("DEBUG", False))
