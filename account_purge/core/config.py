"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Firestore layout (collection and field names) lives here
so the cascade can follow a renamed schema without code changes.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Firestore rejects a commit with more than 500 writes.
FIRESTORE_MAX_BATCH_WRITES = 500


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Firebase credentials are optional at load time so that tests and the
    health endpoint work without them; the composition root refuses to build
    the deletion use case when they are missing.
    """

    # App
    app_name: str = "account-purge"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Outbound HTTP (Firestore REST, Identity Toolkit)
    http_timeout_seconds: float = 30.0

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    # Overrides project_id from the service account (e.g. emulator projects).
    firebase_project_id: str | None = None
    # Web API key for the Identity Toolkit (reauthentication, self-deletion).
    firebase_web_api_key: SecretStr | None = None

    # Firestore layout
    collection_users: str = "users"
    collection_notifications: str = "notifications"
    collection_follow_requests: str = "follow_requests"
    collection_personal_chats: str = "personal_chats"
    collection_groups: str = "groups"
    subcollection_messages: str = "messages"
    field_notification_recipient: str = "userId"
    field_follow_from: str = "fromId"
    field_follow_to: str = "toId"
    field_chat_participants: str = "userIds"
    field_group_members: str = "memberIds"
    # Comma-separated counter fields decremented when a member is removed.
    field_group_counters: str = "members,memberCount"
    field_message_sender: str = "senderId"

    # Cascade
    max_batch_writes: int = FIRESTORE_MAX_BATCH_WRITES
    query_page_size: int = 300
    purge_group_messages: bool = True

    # Teardown
    signup_redirect_path: str = "/signup"

    # Redis (session cache)
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    session_key_prefix: str = "session"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_cascade_limits(self) -> "Settings":
        """Validate batch and paging limits against Firestore's commit cap."""
        if not 1 <= self.max_batch_writes <= FIRESTORE_MAX_BATCH_WRITES:
            raise ValueError(
                f"MAX_BATCH_WRITES must be between 1 and {FIRESTORE_MAX_BATCH_WRITES}, "
                f"got: {self.max_batch_writes}"
            )
        if self.query_page_size < 1:
            raise ValueError(
                f"QUERY_PAGE_SIZE must be at least 1, got: {self.query_page_size}"
            )
        return self

    @property
    def group_counter_fields(self) -> list[str]:
        """Counter fields on a group document, in declaration order."""
        return [f.strip() for f in self.field_group_counters.split(",") if f.strip()]

    @property
    def has_firebase_credentials(self) -> bool:
        has_key = (
            self.firebase_service_account_key is not None
            and bool(self.firebase_service_account_key.get_secret_value())
        )
        return has_key or bool(self.firebase_service_account_path)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
