from flask import Blueprint

from models import storage

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check, including whether the credential store answers
    ---
    tags:
      - Health
    responses:
      200:
        description: API and store are up
      503:
        description: Store unreachable
    """
    store_ok = storage.ping()
    body = {"status": "ok" if store_ok else "degraded", "database": "ok" if store_ok else "unavailable", "version": "1.0.0"}
    return body, 200 if store_ok else 503
