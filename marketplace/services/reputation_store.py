"""Reputation persistence: one row per user, written only by the credibility engine."""

from datetime import datetime

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from marketplace.models.reputation import UserReputation


class ReputationStore:
    def __init__(self, engine: Engine):
        self._engine = engine

    def get(self, user_id: str) -> UserReputation | None:
        with Session(self._engine) as session:
            return session.get(UserReputation, user_id)

    def put(self, user_id: str, score: float, updated_at: datetime) -> UserReputation:
        """Upsert the user's score. Last writer wins."""
        try:
            return self._write(user_id, score, updated_at)
        except IntegrityError:
            # Lost a first-insert race; the row exists now, so this becomes an update
            return self._write(user_id, score, updated_at)

    def _write(self, user_id: str, score: float, updated_at: datetime) -> UserReputation:
        with Session(self._engine) as session:
            record = session.get(UserReputation, user_id)
            if record is None:
                record = UserReputation(user_id=user_id)
            record.credibility_score = score
            record.last_score_update = updated_at
            session.add(record)
            session.commit()
            session.refresh(record)
            return record
