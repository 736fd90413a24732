from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "RestMeta"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./restmeta.db"

    # Security settings
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Logging settings
    log_level: str = "INFO"
    log_json: bool = True

    # Registered metadata field
    custom_meta_field_name: str = "custom_meta"
    custom_meta_storage_key: str = "_custom_meta"
    custom_meta_resource_types: list[str] = ["post"]
    custom_meta_description: str = "A custom meta field for JavaScript applications."
    custom_meta_access: str = "read_write"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
