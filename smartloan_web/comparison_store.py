"""Saved loan scenarios for the web comparison table.

Each visitor (identified by the random token kept in their Flask session)
can save up to ``max_per_user`` scenarios. A saved scenario is the form
input that produced it plus the summary figures shown in the table; the
repayment schedule is never persisted and is recomputed from the saved
input instead. Any SQLAlchemy URL works, SQLite being the local default.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, delete, select
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///comparison_data.sqlite3"


class SavedScenario(Base):
    __tablename__ = "loan_comparison_scenarios"

    # Insertion order, used for listing and trimming
    seq = Column(Integer, primary_key=True, autoincrement=True)
    scenario_id = Column(String(64), unique=True, nullable=False)
    owner = Column(String(64), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    loan_input = Column(Text, nullable=False)
    figures = Column(Text, nullable=False)
    saved_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.scenario_id,
            "name": self.name,
            "request": json.loads(self.loan_input),
            "summary": json.loads(self.figures),
            "created_at": self.saved_at.isoformat(),
        }


def _owned_by(user_token: str):
    return select(SavedScenario).where(SavedScenario.owner == user_token)


class ComparisonStore:
    """Per-visitor scenario list with a size cap; the oldest entries go first.

    Every method is a no-op (or returns nothing) for a missing token, so
    routes can pass ``session.get("user_token")`` straight through.
    """

    def __init__(self, url: str, *, max_per_user: int = 10) -> None:
        engine = create_engine(url, future=True)
        Base.metadata.create_all(engine)
        self._sessions = sessionmaker(engine, expire_on_commit=False, future=True)
        self.max_per_user = max_per_user

    def list_scenarios(self, user_token: Optional[str]) -> List[Dict[str, Any]]:
        if not user_token:
            return []
        with self._sessions() as db:
            saved = db.execute(_owned_by(user_token).order_by(SavedScenario.seq)).scalars()
            return [scenario.to_dict() for scenario in saved]

    def add_scenario(
        self,
        user_token: Optional[str],
        scenario_id: str,
        name: str,
        request_params: Dict[str, Any],
        summary: Dict[str, Any],
    ) -> None:
        if not user_token:
            return
        with self._sessions() as db:
            db.add(
                SavedScenario(
                    scenario_id=scenario_id,
                    owner=user_token,
                    name=name,
                    loan_input=json.dumps(request_params),
                    figures=json.dumps(summary),
                )
            )
            db.flush()
            self._drop_overflow(db, user_token)
            db.commit()

    def remove_scenario(self, user_token: Optional[str], scenario_id: Optional[str]) -> None:
        if not user_token or not scenario_id:
            return
        self._delete(
            (SavedScenario.owner == user_token) & (SavedScenario.scenario_id == scenario_id)
        )

    def clear_scenarios(self, user_token: Optional[str]) -> None:
        if not user_token:
            return
        self._delete(SavedScenario.owner == user_token)

    def _delete(self, criterion) -> None:
        with self._sessions() as db:
            db.execute(delete(SavedScenario).where(criterion))
            db.commit()

    def _drop_overflow(self, db, user_token: str) -> None:
        if not self.max_per_user or self.max_per_user < 0:
            return
        stale = db.execute(
            select(SavedScenario.seq)
            .where(SavedScenario.owner == user_token)
            .order_by(SavedScenario.seq.desc())
            .offset(self.max_per_user)
        ).scalars().all()
        if stale:
            db.execute(delete(SavedScenario).where(SavedScenario.seq.in_(stale)))


def create_store_from_env(url: Optional[str], max_per_user: int = 10) -> ComparisonStore:
    return ComparisonStore(url or DEFAULT_DATABASE_URL, max_per_user=max_per_user)
