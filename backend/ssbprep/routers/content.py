from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from ..content import RECORD_BANKS, STRING_BANKS
from ..store import get_store
from .auth import User, require_admin

router = APIRouter(prefix="/content", tags=["content"])

logger = logging.getLogger(__name__)

BANKS = STRING_BANKS + RECORD_BANKS


class OirQuestion(BaseModel):
    type: Optional[str] = None
    category: str = "General"
    question: str
    image_url: Optional[str] = None
    options: List[str]
    answer: str

    @field_validator("options")
    @classmethod
    def _enough_options(cls, v: List[str]) -> List[str]:
        if len(v) < 2:
            raise ValueError("at least two options are required")
        return v

    @model_validator(mode="after")
    def _answer_is_option(self) -> "OirQuestion":
        if self.answer not in self.options:
            raise ValueError("answer must be one of the options")
        return self


class GpeScenario(BaseModel):
    title: str
    problem_statement: str
    map_image: Optional[str] = None


class AddItemRequest(BaseModel):
    item: Any


class BulkAddRequest(BaseModel):
    items: List[Any]


def _check_bank(bank: str) -> str:
    if bank not in BANKS:
        raise HTTPException(status_code=404, detail=f"Unknown content bank: {bank}")
    return bank


def validate_item(bank: str, item: Any) -> Any:
    """Normalise one bank entry or raise 400."""
    if bank in STRING_BANKS:
        if not isinstance(item, str) or not item.strip():
            raise HTTPException(status_code=400, detail="Item must be a non-empty string")
        return item.strip()
    try:
        if bank == "gpe_scenarios":
            return GpeScenario.model_validate(item).model_dump(exclude_none=True)
        question = OirQuestion.model_validate(item)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=json.loads(e.json(include_url=False)))
    if question.type is None:
        question.type = "verbal" if bank == "oir_verbal_questions" else "non-verbal"
    return question.model_dump(exclude_none=True)


def _append(bank: str, items: List[Any]) -> int:
    def _add(doc: Dict[str, Any]) -> int:
        doc["content"].setdefault(bank, []).extend(items)
        return len(doc["content"][bank])

    total = get_store().update(_add)
    logger.info("Added %d item(s) to %s", len(items), bank)
    return total


def _parse_upload(bank: str, file: UploadFile, raw: bytes) -> List[Any]:
    content_type = file.content_type or ""
    filename = (file.filename or "").lower()
    if bank == "tat_images" and content_type.startswith("image/"):
        return [f"data:{content_type};base64,{base64.b64encode(raw).decode('ascii')}"]
    if bank in STRING_BANKS:
        if not (filename.endswith(".txt") or content_type.startswith("text/")):
            raise HTTPException(status_code=400, detail="Upload a .txt file with one item per line")
        text = raw.decode("utf-8", errors="replace")
        return [line.strip() for line in text.splitlines() if line.strip()]
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise HTTPException(status_code=400, detail="Upload a JSON file with one object or a list of objects")
    return data if isinstance(data, list) else [data]


@router.get("/{bank}")
def list_items(bank: str, admin: User = Depends(require_admin)):
    _check_bank(bank)
    return {"bank": bank, "items": get_store().load()["content"].get(bank, [])}


@router.post("/{bank}", status_code=201)
def add_item(bank: str, req: AddItemRequest, admin: User = Depends(require_admin)):
    _check_bank(bank)
    item = validate_item(bank, req.item)
    return {"bank": bank, "added": 1, "total": _append(bank, [item])}


@router.post("/{bank}/bulk", status_code=201)
def add_items(bank: str, req: BulkAddRequest, admin: User = Depends(require_admin)):
    _check_bank(bank)
    items = [validate_item(bank, item) for item in req.items]
    if not items:
        raise HTTPException(status_code=400, detail="No items to add")
    return {"bank": bank, "added": len(items), "total": _append(bank, items)}


@router.post("/{bank}/upload", status_code=201)
async def upload_items(bank: str, file: UploadFile = File(...), admin: User = Depends(require_admin)):
    _check_bank(bank)
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Empty file")
    items = [validate_item(bank, item) for item in _parse_upload(bank, file, raw)]
    if not items:
        raise HTTPException(status_code=400, detail="No items found in file")
    return {"bank": bank, "added": len(items), "total": _append(bank, items)}


@router.delete("/{bank}/{index}")
def delete_item(bank: str, index: int, admin: User = Depends(require_admin)):
    _check_bank(bank)

    def _remove(doc: Dict[str, Any]) -> Any:
        items = doc["content"].setdefault(bank, [])
        if index < 0 or index >= len(items):
            raise HTTPException(status_code=404, detail="No item at that index")
        return items.pop(index)

    removed = get_store().update(_remove)
    logger.info("Removed item %d from %s", index, bank)
    return {"bank": bank, "removed": removed}
