from dataclasses import asdict
from datetime import datetime, time
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator

from cricnets.config import CONFIG_KEYS
from cricnets.routes.bookings import get_booking_service
from cricnets.services.booking_service import BookingService
from cricnets.services.errors import BookingValidationError

router = APIRouter()


class ConfigOverrideUpdate(BaseModel):
    config_key: str
    config_value: str

    @field_validator("config_key")
    @classmethod
    def validate_key(cls, v):
        v = v.strip()
        if v not in CONFIG_KEYS:
            raise ValueError(f"config_key must be one of {', '.join(CONFIG_KEYS)}")
        return v


class ConfigOverrideResponse(BaseModel):
    config_key: str
    config_value: str
    updated_at: datetime

    class Config:
        from_attributes = True


class EffectiveConfigResponse(BaseModel):
    slot_duration_minutes: int
    business_hours_start: time
    business_hours_end: time
    operator_count: int


class ConfigOverview(BaseModel):
    overrides: List[ConfigOverrideResponse]
    effective: EffectiveConfigResponse


@router.get("/config", response_model=ConfigOverview)
def get_config(service: BookingService = Depends(get_booking_service)):
    """Stored overrides and the values the booking engine currently uses"""
    return ConfigOverview(
        overrides=[ConfigOverrideResponse.model_validate(o) for o in service.list_config_overrides()],
        effective=EffectiveConfigResponse(**asdict(service.effective_config())),
    )


@router.put("/config", response_model=ConfigOverrideResponse)
def update_config(update: ConfigOverrideUpdate, service: BookingService = Depends(get_booking_service)):
    """Create or replace one override"""
    try:
        return service.update_config_override(update.config_key, update.config_value)
    except BookingValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.message)
