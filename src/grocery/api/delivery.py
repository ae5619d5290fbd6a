"""Delivery partner endpoints and admin agent management."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from grocery.api.auth import Principal, current_principal, require_admin, require_agent
from grocery.api.envelope import ok
from grocery.api.schemas import (
    AgentData,
    AgentList,
    AgentOut,
    CompleteDeliveryRequest,
    DeliveryStatusRequest,
    Envelope,
    LocationRequest,
    MessageResponse,
    NearbyAgentList,
    NearbyAgentOut,
    OrderData,
    OrderList,
    OrderOut,
    PartnerApplicationRequest,
    RegisterAgentRequest,
    ReviewApplicationRequest,
    UpdateAgentRequest,
)
from grocery.delivery import queries
from grocery.delivery.application import (
    ApplyAsPartner,
    DeactivateAgent,
    RegisterAgent,
    ReviewApplication,
    UpdateAgent,
)
from grocery.delivery.availability import ToggleAvailability, UpdateAgentLocation
from grocery.delivery.progress import CompleteDelivery, UpdateDeliveryStatus
from grocery.order.queries import agent_orders, get_order

router = APIRouter(prefix="/delivery", tags=["delivery"])


def _agent(agent) -> AgentData:
    return AgentData(agent=AgentOut.model_validate(agent))


def _order(order_id) -> OrderData:
    return OrderData(order=OrderOut.model_validate(get_order(order_id)))


# --- Partner endpoints ---


@router.post("/apply", status_code=201, response_model=Envelope[AgentData])
async def apply_as_partner(body: PartnerApplicationRequest, principal: Principal = Depends(current_principal)):
    command = ApplyAsPartner(
        user_id=principal.id,
        vehicle_type=body.vehicle_type,
        vehicle_number=body.vehicle_number,
        license_number=body.license_number,
    )
    agent_id = current_domain.process(command, asynchronous=False)
    return ok(_agent(queries.get_agent(agent_id)), "Application submitted")


@router.get("/profile", response_model=Envelope[AgentData])
async def profile(principal: Principal = Depends(require_agent)):
    return ok(_agent(queries.agent_for_user(principal.id)))


@router.get("/current-delivery", response_model=Envelope[OrderData])
async def current_delivery(principal: Principal = Depends(require_agent)):
    agent = queries.agent_for_user(principal.id)
    order = get_order(agent.current_order_id) if agent.current_order_id else None
    return ok(OrderData(order=OrderOut.model_validate(order) if order else None))


@router.get("/history", response_model=Envelope[OrderList])
async def delivery_history(principal: Principal = Depends(require_agent)):
    agent = queries.agent_for_user(principal.id)
    return ok(OrderList(orders=[OrderOut.model_validate(o) for o in agent_orders(agent.id)]))


@router.put("/status", response_model=Envelope[OrderData])
async def update_delivery_status(body: DeliveryStatusRequest, principal: Principal = Depends(require_agent)):
    command = UpdateDeliveryStatus(
        agent_user_id=principal.id,
        order_id=body.order_id,
        status=body.status,
        otp=body.otp,
        note=body.note,
    )
    current_domain.process(command, asynchronous=False)
    return ok(_order(body.order_id), "Status updated")


@router.post("/complete-delivery", response_model=Envelope[OrderData])
async def complete_delivery(body: CompleteDeliveryRequest, principal: Principal = Depends(require_agent)):
    command = CompleteDelivery(agent_user_id=principal.id, otp=body.otp, note=body.note)
    order_id = current_domain.process(command, asynchronous=False)
    return ok(_order(order_id), "Delivery completed")


@router.put("/toggle-availability", response_model=Envelope[AgentData])
async def toggle_availability(principal: Principal = Depends(require_agent)):
    current_domain.process(ToggleAvailability(user_id=principal.id), asynchronous=False)
    agent = queries.agent_for_user(principal.id)
    message = "You are now online" if agent.is_online else "You are now offline"
    return ok(_agent(agent), message)


@router.put("/location", response_model=MessageResponse)
async def update_location(body: LocationRequest, principal: Principal = Depends(require_agent)):
    command = UpdateAgentLocation(user_id=principal.id, latitude=body.latitude, longitude=body.longitude)
    current_domain.process(command, asynchronous=False)
    return ok(message="Location updated")


# --- Admin endpoints ---


@router.get("/nearby", response_model=Envelope[NearbyAgentList], dependencies=[Depends(require_admin)])
async def nearby_agents(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    max_distance: float = Query(default=4000, gt=0),
):
    found = queries.nearby_agents(latitude, longitude, max_distance)
    agents = [
        NearbyAgentOut(**AgentOut.model_validate(agent).model_dump(), distance=round(distance))
        for agent, distance in found
    ]
    return ok(NearbyAgentList(agents=agents))


@router.get("/agents", response_model=Envelope[AgentList], dependencies=[Depends(require_admin)])
async def list_agents(
    is_available: bool | None = None,
    is_active: bool | None = None,
    is_online: bool | None = None,
    application_status: str | None = None,
):
    agents = queries.list_agents(
        is_available=is_available,
        is_active=is_active,
        is_online=is_online,
        application_status=application_status,
    )
    return ok(AgentList(agents=[AgentOut.model_validate(a) for a in agents]))


@router.post("/agents", status_code=201, response_model=Envelope[AgentData], dependencies=[Depends(require_admin)])
async def register_agent(body: RegisterAgentRequest):
    command = RegisterAgent(
        name=body.name,
        phone=body.phone,
        email=body.email,
        vehicle_type=body.vehicle_type,
        vehicle_number=body.vehicle_number,
        license_number=body.license_number,
    )
    agent_id = current_domain.process(command, asynchronous=False)
    return ok(_agent(queries.get_agent(agent_id)), "Delivery agent created")


@router.put("/agents/{agent_id}", response_model=Envelope[AgentData], dependencies=[Depends(require_admin)])
async def update_agent(agent_id: str, body: UpdateAgentRequest):
    command = UpdateAgent(
        agent_id=agent_id,
        name=body.name,
        phone=body.phone,
        email=body.email,
        vehicle_type=body.vehicle_type,
        vehicle_number=body.vehicle_number,
        license_number=body.license_number,
    )
    current_domain.process(command, asynchronous=False)
    return ok(_agent(queries.get_agent(agent_id)), "Delivery agent updated")


@router.delete("/agents/{agent_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def deactivate_agent(agent_id: str):
    current_domain.process(DeactivateAgent(agent_id=agent_id), asynchronous=False)
    return ok(message="Delivery agent deactivated")


@router.put("/agents/{agent_id}/review", response_model=Envelope[AgentData], dependencies=[Depends(require_admin)])
async def review_application(agent_id: str, body: ReviewApplicationRequest):
    current_domain.process(ReviewApplication(agent_id=agent_id, status=body.status), asynchronous=False)
    return ok(_agent(queries.get_agent(agent_id)), f"Application {body.status}")
