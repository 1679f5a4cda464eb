from abc import ABC, abstractmethod
from typing import Any

from docinsight.core.exceptions import AppError
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseService(ABC):
    """Runs a named service action: validate its arguments, then perform it.

    Domain failures (``AppError`` subclasses) reach the API exception handlers
    as raised. Anything else is logged with the service and action names and
    re-raised as a plain ``AppError``, which the API reports as a 500.
    """

    async def execute(self, action: str, **kwargs) -> Any:
        self.validate(action, **kwargs)
        try:
            return await self.run(action, **kwargs)
        except AppError:
            raise
        except Exception as e:
            service = type(self).__name__
            LOGGER.error(
                f"{service} failed during {action}",
                exc_info=True,
                extra={"service": service, "action": action}
            )
            raise AppError(f"Could not {action.replace('_', ' ')}: {e}", original_error=e) from e

    def validate(self, action: str, **kwargs) -> None:
        """Reject bad arguments for ``action``; accepts everything by default."""

    @abstractmethod
    async def run(self, action: str, **kwargs) -> Any:
        """Perform ``action``."""
