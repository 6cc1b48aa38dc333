#!/usr/bin/env python3
"""
EVN Reservoir Controller - API endpoints for hydropower reservoir data
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from services.errors import ReservoirDataUnavailable
from services.evn_reservoir_service import EVNReservoirService

router = APIRouter(prefix="/api/reservoir", tags=["EVN Reservoirs"])
service = EVNReservoirService()


def _unavailable(e: ReservoirDataUnavailable) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": "Failed to scrape EVN reservoir data",
            "message": str(e),
        },
    )


@router.get("")
async def get_reservoirs():
    """
    Lấy dữ liệu hồ chứa thủy điện EVN

    Nguồn theo thứ tự: DB cache (1 ngày) -> memory cache (30 phút)
    -> scrape EVN -> cache cũ nếu scrape lỗi.
    """
    try:
        response = await service.get_reservoir_data(force_refresh=False)
        return response.to_payload()
    except ReservoirDataUnavailable as e:
        return _unavailable(e)


@router.post("")
async def refresh_reservoirs(
    bypass_db: Optional[bool] = Query(None, description="Bỏ qua cả DB cache của backend"),
):
    """Force refresh: xóa memory cache rồi lấy lại dữ liệu"""
    try:
        response = await service.get_reservoir_data(force_refresh=True, bypass_db=bypass_db)
        return response.to_payload()
    except ReservoirDataUnavailable as e:
        return _unavailable(e)


@router.get("/summary")
async def get_summary():
    """Get reservoir summary statistics"""
    try:
        summary = await service.get_summary()
        return summary.model_dump()
    except ReservoirDataUnavailable as e:
        return _unavailable(e)


@router.get("/basin/{basin_name}")
async def get_by_basin(basin_name: str) -> Dict[str, Any]:
    """Get reservoirs for a specific basin"""
    try:
        data = await service.get_by_basin(basin_name)
        return {
            "basin": basin_name.upper(),
            "total": len(data),
            "reservoirs": [r.model_dump(by_alias=True) for r in data],
        }
    except ReservoirDataUnavailable as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{name}")
async def get_reservoir_by_name(name: str) -> Dict[str, Any]:
    """Get specific reservoir by name"""
    try:
        reservoir = await service.get_by_name(name)
        if reservoir is None:
            raise HTTPException(status_code=404, detail=f"Reservoir '{name}' not found")
        return reservoir.model_dump(by_alias=True)
    except HTTPException:
        raise
    except ReservoirDataUnavailable as e:
        raise HTTPException(status_code=500, detail=str(e))
