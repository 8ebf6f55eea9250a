"""pm_market REST endpoints.

GET /markets                          — list with cursor pagination
GET /markets/{market_id}              — full detail
GET /markets/{market_id}/orders       — orders placed against the market
GET /markets/{market_id}/trades       — AMM fills in the market
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.application.trades_service import TradesApplicationService
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_market.application.service import MarketApplicationService
from src.pm_order.application import service as order_svc

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()
_trades = TradesApplicationService()


@router.get("")
async def list_markets(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: Literal["active", "resolved", "disputed", "cancelled", "all"] | None = Query(
        None, description="Filter by status. Default: active. Use all for no filter."
    ),
    category: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_markets(db, status, category, cursor, limit)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_market(db, market_id)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{market_id}/orders")
async def list_market_orders(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None, description="Pagination cursor (order ID)"),
) -> ApiResponse:
    await _service.require_market(db, market_id)
    result = await order_svc.list_market_orders(market_id, limit, cursor, db)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{market_id}/trades")
async def list_market_trades(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    await _service.require_market(db, market_id)
    result = await _trades.list_market_trades(db, market_id, limit)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
