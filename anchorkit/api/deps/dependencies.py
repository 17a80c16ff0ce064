"""
Dependency injection helpers.

The record store and dispatcher are built once per application in the
lifespan handler and kept on ``app.state``; these factories hand them to
routes.

Dependencies: fastapi, anchorkit.application.services
System role: DI seam between routers and services
"""

from fastapi import Depends, Request

from anchorkit.application.services.message_handlers import MessageDispatcher
from anchorkit.application.services.record_store import RecordStore
from anchorkit.configs import Settings


def get_settings_dependency(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_record_store(request: Request) -> RecordStore:
    """
    Get the application's record store.

    Args:
        request: Current request

    Returns:
        RecordStore: Store opened during startup
    """
    return request.app.state.record_store


def get_message_dispatcher(store: RecordStore = Depends(get_record_store)) -> MessageDispatcher:
    """
    Get a message dispatcher bound to the application's store.

    Args:
        store: Record store (injected via Depends)

    Returns:
        MessageDispatcher: Handler table for transport messages
    """
    return MessageDispatcher(store)
