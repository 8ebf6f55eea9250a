from src.pm_common.errors import MarketNotActiveError, MarketNotFoundError
from src.pm_market.domain.models import Market


def check_market_active(market: Market | None, market_id: str) -> Market:
    if market is None:
        raise MarketNotFoundError(market_id)
    if not market.is_active:
        raise MarketNotActiveError(market_id)
    return market
