"""
Transport message endpoint.

Routes: POST /messages - Dispatch one ``{type, payload, requestId}`` envelope

Domain failures come back as ``200`` with ``success: false``; only
unexpected errors produce an HTTP error status.

Dependencies: anchorkit.application.services.message_handlers, anchorkit.models
System role: HTTP adapter for the transport boundary
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from anchorkit.api.deps import get_message_dispatcher
from anchorkit.application.services.message_handlers import MessageDispatcher
from anchorkit.models.common import TransportRequest, TransportResponse
from anchorkit.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", response_model=TransportResponse, response_model_by_alias=True)
async def dispatch_message(
    request: TransportRequest,
    dispatcher: MessageDispatcher = Depends(get_message_dispatcher),
) -> TransportResponse:
    """
    Dispatch a transport request to its handler.

    Args:
        request: Envelope with operation type and payload
        dispatcher: Injected MessageDispatcher

    Returns:
        TransportResponse: Success or error envelope

    Raises:
        HTTPException(500): Unexpected failure outside the domain error hierarchy
    """
    try:
        return await dispatcher.dispatch(request)
    except Exception as e:
        log_exception_with_context(logger, "Message dispatch failed", e, message_type=request.type)
        raise HTTPException(status_code=500, detail=f"Message dispatch failed: {str(e)}")
