"""
Entrypoint for running the Storefront API in development: python -m api
"""
import os
from . import create_app

# APP_ENV selects the configuration (see get_config())
app = create_app()

if __name__ == "__main__":
    # In production run behind a WSGI server (gunicorn/uwsgi) instead
    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_RUN_PORT", "8000"))
    debug = os.getenv("FLASK_DEBUG", str(app.config.get("DEBUG", False))).lower() in ("1", "true", "yes")
    app.run(host=host, port=port, debug=debug)
