from pydantic_settings import BaseSettings


class ConfigurationError(RuntimeError):
    """A required setting is missing or empty."""


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://app:devpassword@db:5432/checkout"

    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    STRIPE_SUCCESS_URL: str = ""
    STRIPE_CANCEL_URL: str = ""
    WEBHOOK_TOLERANCE_SECONDS: int = 300

    STORE_TIMEOUT_SECONDS: float = 5.0

    JWT_SECRET_KEY: str = ""

    APP_ENV: str = "development"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def require(self, name: str) -> str:
        """Return a setting's value, raising ConfigurationError if it is empty."""
        value = getattr(self, name)
        if not value:
            raise ConfigurationError(f"{name} is not configured")
        return value

    def require_webhook_secret(self) -> str:
        return self.require("STRIPE_WEBHOOK_SECRET")


settings = Settings()
