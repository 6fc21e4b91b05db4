"""
Trial/billing state machine

``compute_trial_transition`` is a pure function of
``(current status, current trial end, command, now)``; callers persist the
returned pair in one write. Commands are typed so that an action without its
required parameter cannot be constructed; ``command_from_update`` is where a
raw request is checked and turned into one.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from admin_console.core.config import get_settings
from admin_console.core.errors import ValidationError
from admin_console.models.account import PlanStatus
from admin_console.models.types import as_utc, utcnow
from admin_console.schemas.account import TrialAction, TrialSettingsUpdate

settings = get_settings()


class ExtendTrial(BaseModel):
    action: Literal["extend"] = "extend"
    extension_days: int = Field(..., gt=0)


class EndTrial(BaseModel):
    action: Literal["end"] = "end"


class RestartTrial(BaseModel):
    action: Literal["restart"] = "restart"


class SetCustomTrialEnd(BaseModel):
    action: Literal["set_custom_end"] = "set_custom_end"
    trial_ends_at: datetime


TrialCommand = Union[ExtendTrial, EndTrial, RestartTrial, SetCustomTrialEnd]


@dataclass(frozen=True)
class TrialState:
    plan_status: PlanStatus
    trial_ends_at: Optional[datetime]


def command_from_update(update: TrialSettingsUpdate) -> TrialCommand:
    """Validate required parameters before any state is computed"""
    action = TrialAction(update.action)

    if action == TrialAction.EXTEND:
        if not update.extension_days or update.extension_days <= 0:
            raise ValidationError("Extension days required for extend action")
        return ExtendTrial(extension_days=update.extension_days)

    if action == TrialAction.END:
        return EndTrial()

    if action == TrialAction.RESTART:
        return RestartTrial()

    if update.trial_ends_at is None:
        raise ValidationError("Trial end date required for set_custom_end action")
    return SetCustomTrialEnd(trial_ends_at=as_utc(update.trial_ends_at))


def compute_trial_transition(
    current_status: PlanStatus,
    current_trial_ends_at: Optional[datetime],
    command: TrialCommand,
    now: Optional[datetime] = None,
) -> TrialState:
    """Next (planStatus, trialEndsAt) for a trial command"""
    now = now or utcnow()

    if isinstance(command, ExtendTrial):
        start = current_trial_ends_at or now
        return TrialState(PlanStatus.TRIAL, start + timedelta(days=command.extension_days))

    if isinstance(command, EndTrial):
        return TrialState(PlanStatus.ACTIVE, now)

    if isinstance(command, RestartTrial):
        return TrialState(PlanStatus.TRIAL, now + timedelta(days=settings.RESTART_TRIAL_DAYS))

    if isinstance(command, SetCustomTrialEnd):
        ends_at = command.trial_ends_at
        status = PlanStatus.TRIAL if ends_at > now else PlanStatus.ACTIVE
        return TrialState(status, ends_at)

    raise ValidationError(f"Unknown trial action: {command!r}")
