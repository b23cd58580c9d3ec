"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """ArtRoom application settings loaded from environment variables."""

    # Hosted backend (database, storage, auth)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""

    # Shared secret of the auth service; enables local session verification
    jwt_secret: str = ""
    jwt_audience: str = "authenticated"

    # Public URL for invite links
    base_url: str = "http://localhost:8080"

    # Storage
    storage_bucket: str = "artworks"
    max_upload_size_mb: int = 20

    # Artwork visibility
    public_window_days: int = 14
    gallery_limit: int = 200

    # Invites
    invite_token_length: int = 28

    # Login: usernames are mapped onto this email domain
    login_email_domain: str = "love.you"

    # Wall-clock zone used for user-entered "made at" values
    timezone: str = "Asia/Seoul"

    # CORS (comma-separated extra origins, in addition to localhost defaults)
    cors_origins: str = ""

    model_config = {
        "env_prefix": "ARTROOM_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


# Singleton instance
settings = Settings()
