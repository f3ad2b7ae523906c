# File: hebrewduo_app/modules/stats/routes/api.py

from flask import jsonify
from flask_login import current_user, login_required

from .. import stats_bp
from ....core.error_handlers import success_response
from ..services import StatsService


@stats_bp.route('/dashboard', methods=['GET'])
@login_required
def dashboard():
    return jsonify(success_response(StatsService.get_dashboard(current_user)))


@stats_bp.route('/profile', methods=['GET'])
@login_required
def profile():
    return jsonify(success_response(StatsService.get_profile(current_user)))
