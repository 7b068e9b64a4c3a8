# ============================================================================
# FILE: app/api/v1/coaches.py
# Coach slots, packages and availability rules - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path, status
from datetime import date
from uuid import UUID

from app.api.dependencies import (
    get_availability_service,
    get_rule_service,
    get_store,
)
from app.config.settings import settings
from app.schemas.scheduling import AvailabilityRuleCreate, AvailabilityRuleUpdate, SlotListResponse
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.rule_service import AvailabilityRuleService
from app.services.storage.scheduling_store import SchedulingStore

router = APIRouter(prefix="/coaches", tags=["coaches"])


@router.get("/{coach_id}/available-slots", response_model=SlotListResponse)
def list_available_slots(
        coach_id: UUID = Path(..., description="The coach ID"),
        start_date: date = Query(..., description="First calendar date of the window"),
        end_date: date = Query(..., description="Last calendar date of the window (inclusive)"),
        duration: int = Query(settings.DEFAULT_SLOT_DURATION_MINUTES, description="Session length in minutes"),
        service: AvailabilityService = Depends(get_availability_service)
):
    """
    List bookable slots for a coach between two dates.
    An empty list means the coach has no free time in the window.
    """
    slots = service.list_slots(coach_id, start_date, end_date, duration)
    return {"slots": [slot.to_dict() for slot in slots]}


@router.get("/{coach_id}/packages")
def list_packages(
        coach_id: UUID = Path(..., description="The coach ID"),
        store: SchedulingStore = Depends(get_store)
):
    """Active packages offered by the coach, cheapest first."""
    return {"packages": [package.to_dict() for package in store.list_packages(coach_id)]}


@router.get("/{coach_id}/availability")
def list_availability_rules(
        coach_id: UUID = Path(..., description="The coach ID"),
        service: AvailabilityRuleService = Depends(get_rule_service)
):
    """Availability rules for the coach, ordered by weekday and start time."""
    return {"availability": [rule.to_dict() for rule in service.list_rules(coach_id)]}


@router.post("/{coach_id}/availability", status_code=status.HTTP_201_CREATED)
def create_availability_rule(
        payload: AvailabilityRuleCreate,
        coach_id: UUID = Path(..., description="The coach ID"),
        service: AvailabilityRuleService = Depends(get_rule_service)
):
    rule = service.create_rule(coach_id, payload)
    return {"availability": rule.to_dict(), "message": "Availability created successfully"}


@router.put("/{coach_id}/availability/{rule_id}")
def update_availability_rule(
        payload: AvailabilityRuleUpdate,
        coach_id: UUID = Path(..., description="The coach ID"),
        rule_id: UUID = Path(..., description="The availability rule ID"),
        service: AvailabilityRuleService = Depends(get_rule_service)
):
    rule = service.update_rule(coach_id, rule_id, payload)
    return {"availability": rule.to_dict(), "message": "Availability updated successfully"}


@router.delete("/{coach_id}/availability/{rule_id}")
def delete_availability_rule(
        coach_id: UUID = Path(..., description="The coach ID"),
        rule_id: UUID = Path(..., description="The availability rule ID"),
        service: AvailabilityRuleService = Depends(get_rule_service)
):
    service.delete_rule(coach_id, rule_id)
    return {"message": "Availability deleted successfully"}
