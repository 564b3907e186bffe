from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text
from .db import Base


class AppDocument(Base):
	__tablename__ = "app_documents"
	# One row per root document; the whole tree is a JSON string
	key = Column(String(128), primary_key=True)
	payload = Column(Text, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	# jti of the issued token
	session_id = Column(String(64), primary_key=True)
	# Roll number for candidates, admin username for admins
	username = Column(String(128), nullable=False, index=True)
	role = Column(String(16), default="candidate", nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)
