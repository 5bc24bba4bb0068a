"""
Monthly ceiling on Mapbox API calls.

One MapboxRequest row per calendar month ('YYYY-MM') holds the running count.
Every feature that talks to Mapbox shares the same counter.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from exceptions import QuotaExceeded
from models.MapboxRequest import MapboxRequest
from utils.logger import setup_api_logger

logger = setup_api_logger()

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class MapboxRequestLimiter:

    def __init__(self, db: Session, monthly_limit: Optional[int] = None):
        self.db = db
        self.monthly_limit = monthly_limit if monthly_limit is not None else settings.MAPBOX_MONTHLY_REQUEST_LIMIT

    def check_quota(self) -> None:
        """Raise QuotaExceeded when the current period has reached the limit.

        Read-only: a period without a row counts as zero.
        """
        period = self.current_period()
        count = self._current_count(period)

        if count >= self.monthly_limit:
            logger.warning(
                "Mapbox monthly quota exceeded | period=%s | current_count=%s | limit=%s",
                period, count, self.monthly_limit,
            )
            raise QuotaExceeded(period=period, count=count, limit=self.monthly_limit)

    def increment_count(self) -> None:
        """Add one request to the current period in a single atomic upsert.

        The counter is written and committed in a session of its own, so the
        caller's pending work is neither committed with it nor able to give
        the request back on rollback.
        """
        period = self.current_period()
        now = datetime.now(timezone.utc)

        with Session(bind=self.db.get_bind()) as session:
            insert = _UPSERT_INSERTS.get(session.get_bind().dialect.name)

            if insert is not None:
                stmt = insert(MapboxRequest).values(period=period, count=1, last_request_at=now)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[MapboxRequest.period],
                    set_={"count": MapboxRequest.count + 1, "last_request_at": now},
                )
                session.execute(stmt)
            else:
                self._increment_portable(session, period, now)

            session.commit()

    def get_usage_stats(self) -> dict:
        period = self.current_period()
        count = self._current_count(period)
        return {
            "period": period,
            "count": count,
            "limit": self.monthly_limit,
            "remaining": max(0, self.monthly_limit - count),
        }

    @staticmethod
    def current_period() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m")

    def _current_count(self, period: str) -> int:
        count = self.db.query(MapboxRequest.count).filter(MapboxRequest.period == period).scalar()
        return count or 0

    def _increment_portable(self, session: Session, period: str, now: datetime) -> None:
        # UPDATE ... SET count = count + 1 first; insert only when the row is missing
        result = session.execute(
            update(MapboxRequest)
            .where(MapboxRequest.period == period)
            .values(count=MapboxRequest.count + 1, last_request_at=now)
        )
        if result.rowcount:
            return

        try:
            with session.begin_nested():
                session.add(MapboxRequest(period=period, count=1, last_request_at=now))
        except IntegrityError:
            # another request created the row in between
            session.execute(
                update(MapboxRequest)
                .where(MapboxRequest.period == period)
                .values(count=MapboxRequest.count + 1, last_request_at=now)
            )
