"""
Quota cooldown tracking for low-priority AI jobs.

Once any best-effort job sees a quota / 429 error the cooldown is armed and,
for the next QUOTA_COOLDOWN_SECONDS, low-priority jobs use their local
fallbacks instead of spending whatever quota is left. Lesson generation does
not consult this state.
"""

import logging
import time
from typing import Callable, Optional

from utils.model_config import QUOTA_COOLDOWN_SECONDS

logger = logging.getLogger(__name__)

QUOTA_MARKERS = ("429", "quota", "RESOURCE_EXHAUSTED")


def is_quota_error(error: BaseException) -> bool:
    """429 status (any SDK's attribute name) or a quota marker in the message"""
    for attr in ("status_code", "code", "status"):
        if getattr(error, attr, None) == 429:
            return True
    message = str(error)
    return any(marker in message for marker in QUOTA_MARKERS)


class QuotaCooldown:
    """Time-boxed suppression of AI calls after a quota error."""

    def __init__(
        self,
        cooldown_seconds: float = QUOTA_COOLDOWN_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock or time.monotonic
        self._exhausted_at: Optional[float] = None

    def mark_exhausted(self) -> None:
        self._exhausted_at = self._clock()
        logger.info(f"[Quota] Marked quota as exhausted, cooldown for {self.cooldown_seconds:.0f}s")

    def is_available(self) -> bool:
        if self._exhausted_at is None:
            return True
        return self._clock() - self._exhausted_at >= self.cooldown_seconds

    def reset(self) -> None:
        self._exhausted_at = None
