from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "FieldServiceDocs"
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    # Bearer token for document routes. Unset means the routes are open,
    # which is only meant for local development behind the app gateway.
    service_token: str | None = None

    # Backend-as-a-service storage API
    storage_url: str = "http://127.0.0.1:54321"
    storage_service_key: str = ""
    logo_bucket: str = "company-logos"
    social_icon_bucket: str = "social-icons"
    photo_bucket: str = "job-photos"
    signed_url_ttl_seconds: int = 600  # 10 minutes
    http_timeout: float = 15.0
    max_image_bytes: int = 5 * 1024 * 1024  # 5 MiB

    # Outbound mail
    resend_api_url: str = "https://api.resend.com"
    resend_api_key: str = ""
    mail_from: str = "Notifications <noreply@example.com>"

    # "paginate" flows overflowing line items, notes and terms onto new pages;
    # "truncate" drops whatever does not fit on the current page.
    overflow_mode: str = "paginate"

    @property
    def db_path(self) -> Path:
        return self.data_path / "db.sqlite"

    model_config = {"env_prefix": "DOCGEN_"}


settings = Settings()
