# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
from typing import List, Optional
from pathlib import Path

class Settings(BaseSettings):
    # Storage settings
    # memory | json | sqlite  (override via .env: STORAGE_BACKEND=sqlite)
    storage_backend: str = "json"
    data_dir: str = "data"
    db_url: str = "sqlite:///data/backoffice.db"

    # CORS settings
    allowed_origins: str = "*"

    # Logging
    log_level: str = "INFO"

    # Email settings
    # resend | smtp
    email_backend: str = "resend"
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    residential_email_from: str = ""
    # Upper bound for a single notification attempt (seconds)
    email_timeout_seconds: float = 10.0

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from_name: str = "Shop Office"

    # Comma-separated list of emails that should be CC'd on every technician notification
    # Example in .env:
    # NOTIFY_ALWAYS_CC=office@example.com,dispatch@example.com
    notify_always_cc: Optional[str] = Field(
        default=None,
        description="Comma-separated emails CC'ed on every technician notification (smtp backend)",
    )

    # ---- Printed document header ----
    company_name: str = "Kentucky Mirror and Plate Glass"
    company_address: str = "822 W Main St, Louisville KY 40202"
    company_phone: str = "502-583-5541"
    company_email: str = "info@kymirror.com"
    company_logo_url: str = "/good%20logo.jpg"

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    def get_cc_list(self) -> List[str]:
        if not self.notify_always_cc:
            return []
        return [addr.strip() for addr in self.notify_always_cc.split(",") if addr.strip()]

    def email_configured(self) -> bool:
        """True when the selected email backend has what it needs to send."""
        if not self.residential_email_from:
            return False
        if self.email_backend.lower() == "smtp":
            return bool(self.smtp_host and self.smtp_user and self.smtp_password)
        return bool(self.resend_api_key)


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
