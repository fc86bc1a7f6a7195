import logging

from flask import jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sitecontent.extensions import db
from . import v1_bp

logger = logging.getLogger(__name__)


@v1_bp.route("/health", methods=["GET"])
def health_check():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as exc:
        logger.error(f"[CONTENT] health check: database unreachable: {exc}")
        database = "unavailable"

    healthy = database == "ok"
    return jsonify({
        "status": "ok" if healthy else "degraded",
        "service": "sitecontent",
        "database": database,
    }), 200 if healthy else 503
