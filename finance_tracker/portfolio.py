"""Price refresh and daily portfolio history.

Prices are simulated: each refresh moves a holding's price by a uniform
random percentage in ``[-change_percent, +change_percent]``.
"""

from __future__ import annotations

import datetime as dt
import logging
import random
from typing import List, Optional, Tuple

from .analytics import portfolio_value, utc_today
from .config import DEFAULT_PRICE_CHANGE_PERCENT
from .models import Holding, PortfolioHistory, db

logger = logging.getLogger(__name__)


def perturb_price(
    price: float,
    rng: Optional[random.Random] = None,
    change_percent: float = DEFAULT_PRICE_CHANGE_PERCENT,
) -> float:
    rng = rng or random
    change = (rng.random() * 2 * change_percent - change_percent) / 100
    return round(price * (1 + change), 2)


def fetch_holdings(user_id: str) -> List[Holding]:
    return (
        Holding.query.filter_by(user_id=user_id)
        .order_by(Holding.created_at, Holding.id)
        .all()
    )


def upsert_history(user_id: str, day: dt.date, value: float) -> PortfolioHistory:
    """Write the day's snapshot, replacing any earlier value for that day."""
    row = PortfolioHistory.query.filter_by(user_id=user_id, date=day).first()
    if row:
        row.value = value
    else:
        row = PortfolioHistory(user_id=user_id, date=day, value=value)
        db.session.add(row)
    return row


def refresh_prices(
    user_id: str,
    rng: Optional[random.Random] = None,
    today: Optional[dt.date] = None,
    change_percent: float = DEFAULT_PRICE_CHANGE_PERCENT,
) -> Tuple[List[Holding], PortfolioHistory]:
    holdings = fetch_holdings(user_id)
    for holding in holdings:
        holding.current_price = perturb_price(holding.current_price, rng, change_percent)

    day = today or utc_today()
    value = portfolio_value(holdings)
    snapshot = upsert_history(user_id, day, value)
    db.session.commit()
    logger.info(
        "Refreshed %d holdings for user %s; portfolio value %.2f on %s",
        len(holdings),
        user_id,
        value,
        day.isoformat(),
    )
    return fetch_holdings(user_id), snapshot


def fetch_history(user_id: str) -> List[PortfolioHistory]:
    return PortfolioHistory.query.filter_by(user_id=user_id).order_by(PortfolioHistory.date).all()
