import logging
from flask import jsonify
from werkzeug.exceptions import HTTPException
from sitecontent.domain.invariants.exceptions import ContentError

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    @app.errorhandler(ContentError)
    def handle_content_error(error):
        if error.status_code >= 500:
            logger.error(f"[API] {type(error).__name__}: {error}")

        response = jsonify({
            "success": False,
            "error": type(error).__name__,
            "message": str(error)
        })
        response.status_code = error.status_code
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        response = jsonify({
            "success": False,
            "error": error.name,
            "message": error.description
        })
        response.status_code = error.code
        return response
