"""
Unified exception hierarchy for the study AI service.

All domain exceptions inherit from StudyAIError and carry:
- error_code: machine-readable string (e.g. "MODELS_EXHAUSTED")
- status_code: HTTP status code
- message: human-readable description (Portuguese, shown to admins)
- context: optional structured metadata dict
"""

from typing import Optional, Dict, Any, List


class StudyAIError(Exception):
    """Base exception for all study AI domain errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.context = context or {}
        super().__init__(message)


class ValidationError(StudyAIError):
    """400-level validation / bad-request errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INVALID_REQUEST",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=400, context=context)


class ConfigurationError(StudyAIError):
    """A provider API key is missing from the environment."""

    def __init__(
        self,
        message: str,
        error_code: str = "AI_NOT_CONFIGURED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)


class GenerationError(StudyAIError):
    """500-level generation failures."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERATION_FAILED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)


class ModelsExhaustedError(GenerationError):
    """Every model of a provider failed or was skipped."""

    def __init__(self, provider: str, models: List[str], message: str):
        self.provider = provider
        self.models = list(models)
        super().__init__(
            message,
            error_code="MODELS_EXHAUSTED",
            context={"provider": provider, "models": self.models},
        )
