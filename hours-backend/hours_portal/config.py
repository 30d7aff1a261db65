from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_EMPLOYEE_TABLES: List[str] = [
    "Employees",
    "Employee",
    "Consultants",
    "Consultant",
    "People",
    "People Table",
    "Staff",
]

DEVELOPMENT_SESSION_SECRET = "development-secret-change-in-production"


class Settings(BaseSettings):
    airtable_api_key: Optional[str] = None
    airtable_base_id: Optional[str] = None
    airtable_api_url: str = "https://api.airtable.com/v0"
    airtable_timeout_seconds: float = 15.0

    clients_table: str = "Clients"
    hours_table: str = "Hours Log"
    employee_tables: List[str] = list(DEFAULT_EMPLOYEE_TABLES)
    employee_lookup_limit: int = 500

    admin_accounts: Optional[str] = None
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    session_secret: Optional[str] = None
    session_ttl_hours: int = 24 * 7
    environment: str = "development"

    public_base_url: Optional[str] = None
    vercel: Optional[str] = None
    vercel_env: Optional[str] = None
    vercel_url: Optional[str] = None

    url_store_path: str = "data/client-urls.json"
    url_store_readonly: bool = False
    database_url: Optional[str] = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def model_post_init(self, __context):
        # Serverless hosts mount the project read-only
        if self.vercel == "1" or self.vercel_env is not None:
            self.url_store_readonly = True

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def resolved_session_secret(self) -> Optional[str]:
        if self.session_secret:
            return self.session_secret
        if self.is_production:
            return None
        return DEVELOPMENT_SESSION_SECRET


settings = Settings()
