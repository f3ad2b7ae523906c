# File: hebrewduo_app/modules/stats/events.py
# Signal subscribers of the stats module.

from flask import current_app

from ...core.signals import content_deactivated, session_completed


@session_completed.connect
def on_session_completed(sender, user_id=None, total=0, answered=0, correct=0, **kwargs):
    ratio = (correct / answered * 100) if answered else 0
    current_app.logger.info(
        "Session completed by user %s: %s/%s correct (%.0f%%) of %s",
        user_id,
        correct,
        answered,
        ratio,
        total,
    )


@content_deactivated.connect
def on_content_deactivated(sender, kind=None, entity_id=None, purged_overrides=0, **kwargs):
    current_app.logger.info("%s %s deactivated, %s overrides purged", kind, entity_id, purged_overrides)
