"""Training sessions: pool building, item picking, scoring and progress."""

from flask import Blueprint

training_bp = Blueprint('training', __name__)
