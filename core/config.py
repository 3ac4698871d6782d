"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the user management service happen here.
No module should call os.getenv() or os.environ.get() directly -- import
get_settings() instead.

Design patterns used:
  lru_cache singleton: the first get_settings() call builds Settings and
      every later call gets the same object. Tests monkeypatch attributes on
      that object to flip a flag for one test.

  BaseSettings (pydantic-settings): values come from the process environment
      first, then an optional .env file. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY, database_url -> DATABASE_URL).

  @model_validator(mode="after"): Cross-field validation once every field is
      resolved. Debug mode generates a throwaway SECRET_KEY with a warning;
      production mode refuses to start without one.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. JWT signing relies on
  key entropy.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or users/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("ums.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'users' / 'ums_users.db'}"


class Settings(BaseSettings):
    """Runtime settings for the user management service.

    Every field has a default, so the only thing a fresh checkout needs is
    DEBUG=true (for a throwaway SECRET_KEY) or a real SECRET_KEY.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string means "not configured"; the validator below either
    # generates a dev key or raises.
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = 3600
    # Accounts start disabled and are confirmed out of band. Leave this off
    # unless something in the deployment actually flips `enabled`.
    require_enabled_accounts: bool = False
    self_registration_enabled: bool = True

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"
    register_rate_limit: str = "5/minute"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://127.0.0.1:5500"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Debug mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive a restart.

        Production mode: refuse to start if SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Issued tokens will not survive a restart.")
            else:
                raise ValueError(
                    "SECRET_KEY is not set. Export SECRET_KEY (32+ characters) "
                    "or add it to .env; DEBUG=true generates a temporary one."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings.

    Environment changes after the first call are not picked up; call
    get_settings.cache_clear() first.
    """
    return Settings()
