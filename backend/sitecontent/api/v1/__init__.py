from flask import Blueprint

v1_bp = Blueprint("v1", __name__)

# route modules register themselves on import
from . import health, content, audit  # noqa: E402,F401
