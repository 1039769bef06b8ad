from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # anon key; Supabase Auth and PostgREST
    supabase_service_role_key: Optional[str] = None

    # Sharing
    frontend_url: str = "http://localhost:5173"  # base of the share URLs handed to link creators
    public_link_rate_limit: str = "20/minute"  # applied per client IP to public redemption endpoints

    # App
    app_name: str = "hypervision-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_frontend_url(self) -> str:
        return (self.frontend_url or "http://localhost:5173").rstrip("/")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
