from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import uuid

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
import logging

from ..settings import settings
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import AuthSession
from ..store import get_store
from ..users import login_user

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/admin/token")

CANDIDATE = "candidate"
ADMIN = "admin"


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"
	user: Optional[Dict[str, Any]] = None


class User(BaseModel):
	# Roll number for candidates
	username: str
	role: str = CANDIDATE
	session_id: Optional[str] = None


class LoginRequest(BaseModel):
	name: str
	roll_number: str


_admins: Dict[str, str] = {}


def _ensure_seed_admin() -> None:
	username = settings.admin_username
	password = settings.admin_password_plain
	if username and password and username not in _admins:
		_admins[username] = pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(plain_password, hashed_password)


def authenticate_admin(username: str, password: str) -> Optional[User]:
	_ensure_seed_admin()
	hashed = _admins.get(username)
	if hashed and verify_password(password, hashed):
		return User(username=username, role=ADMIN)
	return None


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = settings.access_token_expire_minutes
		delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=30)
	return datetime.now(timezone.utc) + delta


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	to_encode.update({"exp": _resolve_expiry(expires_delta)})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _issue_session(db: Session, username: str, role: str) -> str:
	session_id = uuid.uuid4().hex
	db.add(AuthSession(session_id=session_id, username=username, role=role))
	db.commit()
	return create_access_token({"sub": username, "jti": session_id, "role": role})


def user_from_token(token: str, db: Session) -> User:
	"""Validate a bearer token against its server-side session row."""
	credentials_exception = HTTPException(status_code=401, detail="Could not validate credentials")
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise credentials_exception
	username: str | None = payload.get("sub")
	jti: str | None = payload.get("jti")
	if username is None or jti is None:
		raise credentials_exception
	row = db.get(AuthSession, jti)
	# Missing row means logged out or purged
	if not row or row.username != username:
		raise credentials_exception
	row.last_activity_at = datetime.utcnow()
	db.commit()
	return User(username=username, role=row.role, session_id=jti)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
	return user_from_token(token, db)


def require_admin(user: User = Depends(get_current_user)) -> User:
	if user.role != ADMIN:
		raise HTTPException(status_code=403, detail="Admin access required")
	return user


def require_candidate(user: User = Depends(get_current_user)) -> User:
	if user.role != CANDIDATE:
		raise HTTPException(status_code=403, detail="Candidate login required")
	return user


@router.post("/login", response_model=Token)
async def login(req: LoginRequest, db: Session = Depends(get_db)):
	name = (req.name or "").strip()
	roll_number = (req.roll_number or "").strip()
	if not name or not roll_number:
		raise HTTPException(status_code=400, detail="name and roll_number are required")
	profile = get_store().update(lambda doc: dict(login_user(doc, name, roll_number)))
	access_token = _issue_session(db, roll_number, CANDIDATE)
	logger.info("Candidate %s logged in", roll_number)
	return Token(access_token=access_token, user=profile)


@router.post("/admin/token", response_model=Token)
async def admin_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	user = authenticate_admin(form_data.username, form_data.password)
	if not user:
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	return Token(access_token=_issue_session(db, user.username, ADMIN))


@router.post("/logout")
async def logout(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = db.get(AuthSession, user.session_id)
	if row is not None:
		db.delete(row)
		db.commit()
	return {"ok": True}


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
	return user
