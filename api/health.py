import logging

from flask import Blueprint
from sqlalchemy.exc import SQLAlchemyError

from api import current_storage
from api.errors import error_response

bp = Blueprint("health", __name__)
logger = logging.getLogger(__name__)


@bp.get("/health")
def health():
    """
    Health check (includes a database round-trip)
    ---
    tags:
      - Health
    responses:
      200:
        description: API and database are up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            database:
              type: string
              example: ok
      503:
        description: Database unreachable
    """
    try:
        current_storage().ping()
    except SQLAlchemyError as exc:
        logger.warning("Health check failed: %s", exc)
        return error_response("SERVICE_UNAVAILABLE", "Database unreachable", 503)
    return {"status": "ok", "database": "ok"}, 200
