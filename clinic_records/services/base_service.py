"""
Shared service helpers.

Services let domain errors through untouched and wrap anything else a
repository raises into a StorageError, keeping the original message.
"""

import logging
from typing import Awaitable, TypeVar

from clinic_records.core.exceptions import ClinicRecordsError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_repository(operation: str, awaitable: Awaitable[T]) -> T:
    """Await a repository call, translating unexpected failures."""
    try:
        return await awaitable
    except ClinicRecordsError:
        raise
    except Exception as e:
        logger.error(
            f"Repository failure during {operation}",
            extra={"context": {"operation": operation, "error": str(e)}},
            exc_info=True,
        )
        raise StorageError(operation, str(e)) from e
