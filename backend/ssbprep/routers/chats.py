from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..store import get_store
from ..users import find_user
from .auth import User, require_candidate

router = APIRouter(prefix="/chats", tags=["chats"])


class MessageRequest(BaseModel):
    text: str


def thread_id(a: str, b: str) -> str:
    return "__".join(sorted([a, b]))


def _check_peer(doc: Dict[str, Any], me: str, peer: str) -> Dict[str, Any]:
    if peer == me:
        raise HTTPException(status_code=400, detail="You cannot message yourself")
    other = find_user(doc, peer)
    if other is None:
        raise HTTPException(status_code=404, detail="Unknown candidate")
    return other


@router.get("")
def list_threads(user: User = Depends(require_candidate)):
    doc = get_store().load()
    threads: List[Dict[str, Any]] = []
    for other in doc["users"]:
        peer = other.get("roll_number")
        if peer == user.username:
            continue
        messages = doc["chats"].get(thread_id(user.username, peer)) or []
        if not messages:
            continue
        threads.append({
            "thread_id": thread_id(user.username, peer),
            "peer": peer,
            "peer_name": other.get("name"),
            "last_message": messages[-1],
            "count": len(messages),
        })
    threads.sort(key=lambda t: t["last_message"].get("timestamp") or "", reverse=True)
    return threads


@router.get("/{peer}")
def get_thread(peer: str, user: User = Depends(require_candidate)):
    doc = get_store().load()
    _check_peer(doc, user.username, peer)
    return doc["chats"].get(thread_id(user.username, peer)) or []


@router.post("/{peer}", status_code=201)
def send_message(peer: str, req: MessageRequest, user: User = Depends(require_candidate)):
    text = req.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message is empty")
    message = {"sender": user.username, "text": text, "timestamp": datetime.now(timezone.utc).isoformat()}

    def _append(doc: Dict[str, Any]) -> Dict[str, Any]:
        _check_peer(doc, user.username, peer)
        doc["chats"].setdefault(thread_id(user.username, peer), []).append(message)
        return message

    return get_store().update(_append)
