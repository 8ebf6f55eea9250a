# src/pm_admin/api/router.py
"""Platform stats and admin REST API."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_admin.application.service import AdminService
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response

router = APIRouter(tags=["admin"])
_service = AdminService()


@router.get("/stats")
async def get_stats(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    resp = success_response(await _service.get_stats(db))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/admin/invariants")
async def verify_invariants(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    resp = success_response(await _service.verify_all_invariants(db))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
