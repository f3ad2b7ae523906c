"""Personal and shared vocabulary content: themes, levels, words, sets and cards."""

from flask import Blueprint

content_bp = Blueprint('content', __name__)
