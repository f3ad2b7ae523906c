from .pool_builder import CardPoolQueryBuilder, PoolBuilder, WordPoolQueryBuilder
from .progress_service import ProgressService
from .session_manager import TrainingSessionManager

__all__ = [
    'CardPoolQueryBuilder',
    'PoolBuilder',
    'ProgressService',
    'TrainingSessionManager',
    'WordPoolQueryBuilder',
]
