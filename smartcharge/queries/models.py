"""Pydantic records returned by the station query service."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Station(BaseModel):
    """A charging station as stored by the query service."""

    id: int
    name: Optional[str] = None
    lat: float = Field(..., description="Latitude in decimal degrees")
    lng: float = Field(..., description="Longitude in decimal degrees")
    density: int = Field(0, description="Static fallback load on a 0-100 scale")
    price: float = Field(0.0, description="Price per kWh")

    model_config = ConfigDict(frozen=True)


class ForecastEntry(BaseModel):
    """Predicted load for one station in one (day-of-week, hour) slot."""

    station_id: int = Field(..., alias="stationId")
    day_of_week: int = Field(..., ge=0, le=6, alias="dayOfWeek", description="Sunday=0")
    hour: int = Field(..., ge=0, le=23)
    predicted_load: int = Field(0, alias="predictedLoad", description="0-100 scale")

    model_config = ConfigDict(frozen=True, populate_by_name=True)
