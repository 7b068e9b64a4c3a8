# ===== app/services/availability/rule_service.py =====
"""Coach-facing management of availability rules; the boundary where rules are validated"""
import logging
from typing import List
from uuid import UUID, uuid4

from app.core.exceptions import InvalidInputError, NotFoundError
from app.models.availability import AvailabilityRule
from app.schemas.scheduling import AvailabilityRuleCreate, AvailabilityRuleUpdate

logger = logging.getLogger(__name__)


class AvailabilityRuleService:

    def __init__(self, store):
        self.store = store

    def list_rules(self, coach_id: UUID) -> List[AvailabilityRule]:
        return self.store.list_rules(coach_id)

    def create_rule(self, coach_id: UUID, payload: AvailabilityRuleCreate) -> AvailabilityRule:
        rule = AvailabilityRule(
            id=uuid4(),
            coach_id=coach_id,
            day_of_week=payload.day_of_week,
            start_time=payload.start_time,
            end_time=payload.end_time,
            timezone=payload.timezone,
            effective_date=payload.effective_date,
            end_date=payload.end_date,
            is_active=True,
        )
        rule = self.store.save_rule(rule)
        logger.info(f"Created availability rule {rule.id} for coach {coach_id}")
        return rule

    def update_rule(self, coach_id: UUID, rule_id: UUID, payload: AvailabilityRuleUpdate) -> AvailabilityRule:
        rule = self._get_owned_rule(coach_id, rule_id)

        changes = payload.model_dump(exclude_unset=True)
        # end_date may be explicitly cleared; the other fields cannot be nulled
        changes = {k: v for k, v in changes.items() if v is not None or k == "end_date"}

        start_time = changes.get("start_time", rule.start_time)
        end_time = changes.get("end_time", rule.end_time)
        if start_time >= end_time:
            raise InvalidInputError(
                "End time must be after start time",
                details={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()}
            )

        effective_date = changes.get("effective_date", rule.effective_date)
        end_date = changes.get("end_date", rule.end_date)
        if end_date is not None and end_date < effective_date:
            raise InvalidInputError(
                "End date must be on or after effective date",
                details={"effective_date": effective_date.isoformat(), "end_date": end_date.isoformat()}
            )

        for field, value in changes.items():
            setattr(rule, field, value)

        rule = self.store.save_rule(rule)
        logger.info(f"Updated availability rule {rule_id} for coach {coach_id}: {sorted(changes)}")
        return rule

    def delete_rule(self, coach_id: UUID, rule_id: UUID) -> None:
        rule = self._get_owned_rule(coach_id, rule_id)
        self.store.delete_rule(rule)
        logger.info(f"Deleted availability rule {rule_id} for coach {coach_id}")

    def _get_owned_rule(self, coach_id: UUID, rule_id: UUID) -> AvailabilityRule:
        rule = self.store.get_rule(rule_id, coach_id)
        if rule is None:
            raise NotFoundError(
                "Availability rule not found",
                details={"rule_id": str(rule_id), "coach_id": str(coach_id)}
            )
        return rule
