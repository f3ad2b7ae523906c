from .content_service import ContentService
from .visibility_service import VisibilityService

__all__ = ['ContentService', 'VisibilityService']
