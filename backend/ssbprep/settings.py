from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	# Native-audio model used for the live voice interview
	gemini_live_model: str = Field(default="gemini-2.5-flash-native-audio-preview-09-2025", validation_alias="GEMINI_LIVE_MODEL")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# OpenRouter fallback configuration (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="x-ai/grok-4-fast:free", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="NOX SSB Prep", validation_alias="OPENROUTER_TITLE")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=720, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	# Seed admin for content management
	admin_username: str | None = Field(default=None, validation_alias="ADMIN_USERNAME")
	admin_password_plain: str | None = Field(default=None, validation_alias="ADMIN_PASSWORD")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	document_key: str = Field(default="ssb_app_data", validation_alias="DOCUMENT_KEY")

	# Exercise timers (seconds)
	tat_seconds: int = Field(default=240, validation_alias="TAT_SECONDS")
	wat_seconds: int = Field(default=15, validation_alias="WAT_SECONDS")
	srt_seconds: int = Field(default=30, validation_alias="SRT_SECONDS")
	lecturerette_prep_seconds: int = Field(default=180, validation_alias="LECTURERETTE_PREP_SECONDS")
	lecturerette_speech_seconds: int = Field(default=180, validation_alias="LECTURERETTE_SPEECH_SECONDS")
	gpe_read_seconds: int = Field(default=300, validation_alias="GPE_READ_SECONDS")
	gpe_plan_seconds: int = Field(default=600, validation_alias="GPE_PLAN_SECONDS")
	oir_seconds: int = Field(default=1200, validation_alias="OIR_SECONDS")
	oir_question_count: int = Field(default=40, validation_alias="OIR_QUESTION_COUNT")

	# Retention for in-memory exercise sessions and idle auth sessions
	session_retention_hours: int = Field(default=6, validation_alias="SESSION_RETENTION_HOURS")
	auth_session_retention_days: int = Field(default=7, validation_alias="AUTH_SESSION_RETENTION_DAYS")

	# Logging
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
	log_format: str = Field(default="%(asctime)s %(levelname)s [%(name)s] %(message)s", validation_alias="LOG_FORMAT")
	log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
