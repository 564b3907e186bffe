"""Shared root document store.

Every user, chat thread and content bank lives in a single JSON document kept
under one key. Readers always see the document merged over the defaults, so a
partially written or older document never crashes a caller. Listeners get the
current document on subscribe and again after every save.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .content import default_content
from .models import AppDocument

logger = logging.getLogger(__name__)

T = TypeVar("T")
Listener = Callable[[Dict[str, Any]], None]


class StoreError(RuntimeError):
	pass


def default_document() -> Dict[str, Any]:
	return {"users": [], "chats": {}, "content": default_content()}


def merge_with_defaults(data: Any) -> Dict[str, Any]:
	defaults = default_document()
	if not isinstance(data, dict):
		return defaults
	stored_content = data.get("content")
	return {
		**defaults,
		**data,
		"users": data.get("users") or defaults["users"],
		"chats": data.get("chats") or defaults["chats"],
		"content": {**defaults["content"], **(stored_content if isinstance(stored_content, dict) else {})},
	}


class DocumentStore:
	def __init__(self, session_factory: sessionmaker, key: str) -> None:
		self._session_factory = session_factory
		self.key = key
		self._lock = threading.RLock()
		self._listeners: List[Listener] = []

	def _read_raw(self, db: Session) -> Optional[Any]:
		row = db.get(AppDocument, self.key)
		if row is None:
			return None
		return json.loads(row.payload)

	def load(self) -> Dict[str, Any]:
		try:
			with self._session_factory() as db:
				data = self._read_raw(db)
		except (SQLAlchemyError, ValueError):
			logger.exception("Failed to load document %s; using defaults", self.key)
			return default_document()
		if data is None:
			defaults = default_document()
			# Seed only an empty store; save() already logged any failure
			try:
				self.save(defaults)
			except StoreError:
				logger.debug("Seeding %s skipped", self.key)
			return defaults
		return merge_with_defaults(data)

	def save(self, data: Dict[str, Any]) -> None:
		payload = json.dumps(data, ensure_ascii=False)
		with self._lock:
			try:
				with self._session_factory() as db:
					row = db.get(AppDocument, self.key)
					if row is None:
						db.add(AppDocument(key=self.key, payload=payload))
					else:
						row.payload = payload
					db.commit()
			except SQLAlchemyError as exc:
				logger.exception("Failed to save document %s", self.key)
				raise StoreError("Failed to save data") from exc
			listeners = list(self._listeners)
		for callback in listeners:
			try:
				callback(data)
			except Exception:
				logger.exception("Document listener failed")

	def _load_strict(self) -> Dict[str, Any]:
		"""Like load(), but a failed read raises instead of yielding defaults."""
		try:
			with self._session_factory() as db:
				data = self._read_raw(db)
		except (SQLAlchemyError, ValueError) as exc:
			logger.exception("Failed to load document %s for update", self.key)
			raise StoreError("Failed to load data") from exc
		return default_document() if data is None else merge_with_defaults(data)

	def update(self, mutator: Callable[[Dict[str, Any]], T]) -> T:
		# A failed read must never be written back as defaults
		with self._lock:
			data = self._load_strict()
			result = mutator(data)
			self.save(data)
			return result

	def listen(self, callback: Listener) -> Callable[[], None]:
		with self._lock:
			self._listeners.append(callback)
		callback(self.load())

		def unsubscribe() -> None:
			with self._lock:
				if callback in self._listeners:
					self._listeners.remove(callback)

		return unsubscribe


_store: Optional[DocumentStore] = None


def get_store() -> DocumentStore:
	global _store
	if _store is None:
		from .db import SessionLocal
		from .settings import settings
		_store = DocumentStore(SessionLocal, settings.document_key)
	return _store
