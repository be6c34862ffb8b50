import os
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
	# Accept a direct URL (supports either DATABASE_URL or database_url env vars)
	database_url: str | None = None

	# Individual parts; only used when every one of them is provided
	DB_DRIVER: str | None = None
	DB_HOST: str | None = None
	DB_USER: str | None = None
	DB_PASSWORD: str | None = None
	DB_NAME: str | None = None
	DB_PORT: int | None = None

	SECRET_KEY: str = "secret"
	ALGORITHM: str = "HS256"
	ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

	# Share links
	PUBLIC_BASE_URL: str = os.getenv("NEXTAUTH_URL", "http://localhost:3000")
	SHARE_PATH_PREFIX: str = "/p"
	SHARE_DEFAULT_EXPIRY_DAYS: int = 30
	SHARE_SLUG_LENGTH: int = 10
	SHARE_SLUG_MAX_ATTEMPTS: int = 5

	# Friend invitation links
	INVITE_PATH_PREFIX: str = "/invite"
	INVITE_CODE_LENGTH: int = 8
	INVITE_CODE_MAX_ATTEMPTS: int = 10

	# Friend search
	USER_SEARCH_MIN_LENGTH: int = 2
	USER_SEARCH_LIMIT: int = 20

	# Observability
	ENABLE_REQUEST_LOGGING: bool = True
	LOG_SAMPLE_RATE: float = 1.0
	LOG_LEVEL: str = "INFO"

	@property
	def DATABASE_URL(self) -> str:
		# 1) Value from settings (supports .env and OS env via BaseSettings)
		if self.database_url and self.database_url.strip():
			return self.database_url.strip()
		# 2) Assemble from parts
		parts = (self.DB_DRIVER, self.DB_HOST, self.DB_USER, self.DB_PASSWORD, self.DB_NAME, self.DB_PORT)
		if all(p is not None for p in parts):
			return f"{self.DB_DRIVER}://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
		# 3) Local development database
		return "sqlite:///./pinory.db"

	model_config = SettingsConfigDict(
		env_file=".env",
		extra="ignore",
		case_sensitive=False,
	)

settings = Settings()
