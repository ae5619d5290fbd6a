"""Live order tracking over WebSocket.

Clients connect to ``/tracking/orders/{order_id}?token=...`` and receive
``status-updated`` and ``location-updated`` messages for that order. Only
the ordering customer, the assigned agent and admins may watch an order.
"""

import asyncio

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from protean.exceptions import ObjectNotFoundError

from grocery.api.auth import principal_from_token
from grocery.api.errors import ApiError
from grocery.delivery.queries import find_agent_for_user
from grocery.domain import grocery
from grocery.order.queries import get_order
from grocery.tracking import get_hub

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/tracking", tags=["tracking"])


def _may_watch(principal, order) -> bool:
    if principal.is_admin or order.belongs_to(principal.id):
        return True
    agent = find_agent_for_user(principal.id)
    return agent is not None and order.is_assigned_to(agent.id)


async def _forward(websocket: WebSocket, subscription) -> None:
    while True:
        message = await subscription.receive()
        await websocket.send_json(message)


@router.websocket("/orders/{order_id}")
async def track_order(websocket: WebSocket, order_id: str, token: str | None = None):
    try:
        with grocery.domain_context():
            principal = principal_from_token(token or "")
            order = get_order(order_id)
            allowed = _may_watch(principal, order)
    except (ApiError, ObjectNotFoundError):
        allowed = False

    if not allowed:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    hub = get_hub()
    subscription = hub.subscribe(order_id)
    logger.info("tracking subscriber joined", order_id=order_id, user_id=principal.id)
    await websocket.send_json({"event": "subscribed", "order_id": order_id, "data": {"status": order.status}})

    forwarder = asyncio.create_task(_forward(websocket, subscription))
    try:
        # Inbound frames are ignored; reading only detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("tracking subscriber left", order_id=order_id, user_id=principal.id)
    finally:
        forwarder.cancel()
        hub.unsubscribe(order_id, subscription)
