"""Aggregate learning statistics for the dashboard and profile."""

from flask import Blueprint

stats_bp = Blueprint('stats', __name__)
