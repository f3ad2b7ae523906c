"""
Central Signal Registry.

Uses Flask's blinker integration so modules can react to training and content
events without importing each other.

Usage:
    # Publisher
    from hebrewduo_app.core.signals import answer_scored
    answer_scored.send(None, user_id=1, item_id=2, ...)

    # Subscriber (in a module's events.py)
    @answer_scored.connect
    def on_answer_scored(sender, **kwargs):
        ...
"""
from blinker import Namespace

training_signals = Namespace()

# Payload: user_id, source ('words' | 'cards'), item_id, mode, is_correct, new_strength
answer_scored = training_signals.signal('answer_scored')

# Payload: user_id, total, answered, correct
session_completed = training_signals.signal('session_completed')

content_signals = Namespace()

# Payload: kind ('word' | 'theme' | 'set' | 'card'), entity_id, purged_overrides
content_deactivated = content_signals.signal('content_deactivated')
