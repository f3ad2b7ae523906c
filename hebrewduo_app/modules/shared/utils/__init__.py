from .db_session import safe_commit, store_transaction

__all__ = ['safe_commit', 'store_transaction']
