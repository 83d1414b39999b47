"""Translate service results into HTTP responses"""

import logging

from fastapi import HTTPException

from .results import OperationResult

logger = logging.getLogger(__name__)


def raise_for_failure(result: OperationResult) -> None:
    """Raise an HTTPException carrying the failure message and its mapped status"""
    if result.is_success:
        return
    status_code = result.http_status
    if status_code >= 500:
        logger.error(f"❌ Operation failed ({status_code}): {result.error}")
    raise HTTPException(status_code=status_code, detail=result.error)
