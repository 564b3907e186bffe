from __future__ import annotations
from datetime import datetime, timedelta
import logging
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .exercises import purge_stale_sessions
from .models import AuthSession
from .settings import settings

logger = logging.getLogger(__name__)


def purge_idle_auth_sessions(db: Session, *, now: datetime | None = None) -> int:
	threshold = (now or datetime.utcnow()) - timedelta(days=settings.auth_session_retention_days)
	res = db.execute(delete(AuthSession).where(AuthSession.last_activity_at < threshold))
	db.commit()
	return res.rowcount or 0


def run_cleanup(db: Session) -> dict:
	removed = {
		"auth_sessions": purge_idle_auth_sessions(db),
		"exercise_sessions": purge_stale_sessions(settings.session_retention_hours * 3600),
	}
	if any(removed.values()):
		logger.info("Cleanup removed %s", removed)
	return removed
