from services.study_content_service import StudyContentService, is_ai_configured
from services.daily_content_service import DailyContentService
from services.ai_executor import FallbackExecutor, generate_with_ai

__all__ = [
    'StudyContentService',
    'DailyContentService',
    'FallbackExecutor',
    'generate_with_ai',
    'is_ai_configured'
]
