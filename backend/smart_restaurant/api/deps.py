"""Shared FastAPI dependencies for services."""

from typing import Annotated

from fastapi import Depends

from smart_restaurant.core.config import get_qr_token_config, settings
from smart_restaurant.core.qr_token import QrTokenIssuer
from smart_restaurant.db.session import DbSession
from smart_restaurant.services.menu_query import MenuQueryEngine
from smart_restaurant.services.popularity import PopularityScorer, SqlPopularityScorer


def get_popularity_scorer(db: DbSession) -> PopularityScorer:
    return SqlPopularityScorer(db)


def get_menu_query_engine(
    db: DbSession,
    scorer: Annotated[PopularityScorer, Depends(get_popularity_scorer)],
) -> MenuQueryEngine:
    return MenuQueryEngine(db, scorer, days_back=settings.popularity_days_back)


def get_qr_token_issuer(db: DbSession) -> QrTokenIssuer:
    return QrTokenIssuer(db, get_qr_token_config())


MenuEngine = Annotated[MenuQueryEngine, Depends(get_menu_query_engine)]
TokenIssuer = Annotated[QrTokenIssuer, Depends(get_qr_token_issuer)]
