#!/usr/bin/env python3
"""
Data models / Pydantic schemas
"""
import re
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NUMERIC_NAME_PATTERN = re.compile(r"^\d+\.?\d*$")


# =====================================================
# Reservoir readings
# =====================================================

class ReservoirReading(BaseModel):
    """
    One hydropower reservoir snapshot.

    Attributes are snake_case in Python; JSON uses camelCase aliases
    (currentLevel, totalOutflow, ...). Every measurement is nullable
    since EVN leaves cells blank or renders "-".
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    name: str
    current_level: Optional[float] = None       # Htl - mực nước hiện tại (m)
    normal_level: Optional[float] = None        # Hdbt - mực nước dâng bình thường (m)
    dead_level: Optional[float] = None          # Hc - mực nước chết (m)
    inflow: Optional[float] = None              # Qve - lưu lượng đến hồ (m³/s)
    total_outflow: Optional[float] = None       # ΣQx - tổng lượng xả (m³/s)
    turbine_outflow: Optional[float] = None     # Qxt - xả qua turbine (m³/s)
    surface_outflow: Optional[float] = None     # Qxm - xả mặt (m³/s)
    deep_gates_open: Optional[float] = None     # Ncxs - số cửa xả sâu đang mở
    surface_gates_open: Optional[float] = None  # Ncxm - số cửa xả mặt đang mở
    captured_at: str
    basin: Optional[str] = None
    water_percent: Optional[float] = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("reservoir name must not be empty")
        if NUMERIC_NAME_PATTERN.match(value):
            raise ValueError(f"numeric reservoir name '{value}' indicates a misaligned row")
        return value

    @property
    def has_spillway_open(self) -> bool:
        return (self.deep_gates_open or 0) > 0 or (self.surface_gates_open or 0) > 0


# =====================================================
# Response Models
# =====================================================

class SyncResult(BaseModel):
    """Outcome of pushing a scraped batch to the backend store"""
    success: bool
    total_received: int
    status_code: Optional[int] = None
    saved_count: Optional[int] = None
    error: Optional[str] = None


class ReservoirResponse(BaseModel):
    """Body of GET/POST /api/reservoir"""
    model_config = ConfigDict(populate_by_name=True)

    data: List[ReservoirReading]
    cached: bool
    count: int
    source: str
    from_db: Optional[bool] = None
    cached_at: Optional[str] = Field(default=None, alias="cachedAt")
    scraped_at: Optional[str] = Field(default=None, alias="scrapedAt")
    sync_result: Optional[SyncResult] = Field(default=None, alias="syncResult")
    error: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """JSON body: unset optional keys are omitted, null measurements are kept"""
        payload = self.model_dump(by_alias=True, exclude={"data"}, exclude_none=True)
        payload["data"] = [r.model_dump(by_alias=True) for r in self.data]
        return payload


class ReservoirSummary(BaseModel):
    total: int
    by_basin: Dict[str, int]
    high_water_count: int
    spillway_open_count: int
    last_updated: Optional[str] = None
