"""Administration: user management and shared-content activation."""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__)
