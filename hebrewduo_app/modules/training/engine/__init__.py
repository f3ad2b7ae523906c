from .item_picker import ItemPicker, check_written_answer, normalize_answer
from .session_state import SessionPhase, TrainingSession

__all__ = [
    'ItemPicker',
    'SessionPhase',
    'TrainingSession',
    'check_written_answer',
    'normalize_answer',
]
