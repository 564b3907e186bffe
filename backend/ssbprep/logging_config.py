import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .settings import settings


NOISY_LOGGERS = ("httpx", "httpcore", "passlib", "websockets", "google_genai")


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
	root = logging.getLogger()
	# Calling twice (reload, tests) must not stack handlers
	if getattr(root, "_ssbprep_configured", False):
		return
	root.setLevel((level or settings.log_level).upper())
	formatter = logging.Formatter(settings.log_format)

	stream_handler = logging.StreamHandler(sys.stdout)
	stream_handler.setFormatter(formatter)
	root.addHandler(stream_handler)

	log_file = log_file or settings.log_file
	if log_file:
		Path(log_file).parent.mkdir(parents=True, exist_ok=True)
		file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
		file_handler.setFormatter(formatter)
		root.addHandler(file_handler)

	for name in NOISY_LOGGERS:
		logging.getLogger(name).setLevel(logging.WARNING)

	root._ssbprep_configured = True  # type: ignore[attr-defined]
	logging.getLogger(__name__).info("Logging is set up.")
