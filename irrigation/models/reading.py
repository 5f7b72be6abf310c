from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2025-10-24T12:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SensorValues(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: float = Field(..., allow_inf_nan=False, description="°C")
    humidity: float = Field(..., ge=0, le=100, allow_inf_nan=False)
    soil_moisture: float = Field(..., ge=0, le=100, allow_inf_nan=False,
                                 description="0 = dry, 100 = wet")
    pump_status: StrictBool
    servo_angle: StrictInt = Field(..., ge=0, le=180)
    display_message: Optional[StrictStr] = None


class IrrigationDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    should_water: StrictBool
    reason: StrictStr
    comfort_score: float = Field(..., ge=0, le=100, allow_inf_nan=False)
    duration: Optional[StrictInt] = Field(default=None, description="seconds")


class Reading(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: StrictStr  # stamped by the server, never by the sensing process
    sensors: SensorValues
    irrigation: IrrigationDecision

    @classmethod
    def from_dict(cls, data: Any, timestamp: Optional[str] = None) -> "Reading":
        """
        Builds a Reading from a sensing process document (or a serialized
        Reading). Raises ValueError (pydantic ValidationError) on malformed input.
        """
        if not isinstance(data, dict):
            raise ValueError("reading document must be a JSON object")
        if timestamp is not None:
            data = {**data, "timestamp": timestamp}
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def with_watering(self, boost: float, reason: str) -> "Reading":
        """Derived copy with the pump on and soil moisture raised (capped at 100)."""
        return self.model_copy(update={
            "sensors": self.sensors.model_copy(update={
                "soil_moisture": min(100.0, self.sensors.soil_moisture + boost),
                "pump_status": True,
            }),
            "irrigation": self.irrigation.model_copy(update={"reason": reason}),
        })
