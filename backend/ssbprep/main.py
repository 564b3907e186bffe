from pathlib import Path
import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse, RedirectResponse

from .db import Base, SessionLocal, engine
from .cleanup import run_cleanup
from .logging_config import setup_logging
from .settings import settings
from .store import StoreError
from .routers import health, auth, profile, catalog, content, psych, lecturerette, gpe, oir, interview, chats

BASE_DIR = Path(__file__).resolve().parents[2]
FRONTEND_DIR = BASE_DIR / "frontend"
CLEANUP_INTERVAL_SECONDS = 60 * 60

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="NOX SSB Prep API")
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(catalog.router)
app.include_router(content.router)
app.include_router(psych.router)
app.include_router(lecturerette.router)
app.include_router(gpe.router)
app.include_router(oir.router)
app.include_router(interview.router)
app.include_router(chats.router)

# Static frontend at /app when a build is present
if FRONTEND_DIR.is_dir():
	app.mount("/app", StaticFiles(directory=FRONTEND_DIR, html=True), name="frontend")


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
	return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/", include_in_schema=False)
async def redirect_root_to_app():
	return RedirectResponse(url="/app" if FRONTEND_DIR.is_dir() else "/docs")


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}


def _cleanup_once() -> None:
	try:
		with SessionLocal() as db:
			run_cleanup(db)
	except Exception:
		logger.exception("Cleanup failed")


async def _cleanup_watcher():
	while True:
		await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
		_cleanup_once()


@app.on_event("startup")
async def startup_event():
	Base.metadata.create_all(bind=engine)
	_cleanup_once()
	app.state.cleanup_task = asyncio.create_task(_cleanup_watcher())


@app.on_event("shutdown")
async def shutdown_event():
	task = getattr(app.state, "cleanup_task", None)
	if task is not None:
		task.cancel()
