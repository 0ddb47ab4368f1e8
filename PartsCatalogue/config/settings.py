"""
Application settings

Values come from environment variables; main.py loads a .env file with
python-dotenv before anything reads them.
"""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel

from PartsCatalogue.exceptions import ConfigurationError

STORE_BACKENDS = ("firebase", "memory")
ID_STRATEGIES = ("push", "sequential")


class Settings(BaseModel):
    store_backend: str = "memory"

    firebase_database_url: Optional[str] = None
    firebase_storage_bucket: Optional[str] = None
    firebase_auth_token: Optional[str] = None

    # Document store paths
    parts_base_path: str = "material_summary_2025"
    parts_override_path: str = "Parts"
    bom_path: str = "BoM"
    applications_path: str = "PartApplications"

    application_id_strategy: str = "push"
    image_key_prefix: str = ""
    request_timeout_seconds: float = 30.0

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        cors = os.getenv("CORS_ORIGINS")
        return cls(
            store_backend=os.getenv("STORE_BACKEND", defaults.store_backend).lower(),
            firebase_database_url=os.getenv("FIREBASE_DATABASE_URL") or None,
            firebase_storage_bucket=os.getenv("FIREBASE_STORAGE_BUCKET") or None,
            firebase_auth_token=os.getenv("FIREBASE_AUTH_TOKEN") or None,
            parts_base_path=os.getenv("PARTS_BASE_PATH", defaults.parts_base_path),
            parts_override_path=os.getenv("PARTS_OVERRIDE_PATH", defaults.parts_override_path),
            bom_path=os.getenv("BOM_PATH", defaults.bom_path),
            applications_path=os.getenv("APPLICATIONS_PATH", defaults.applications_path),
            application_id_strategy=os.getenv("APPLICATION_ID_STRATEGY", defaults.application_id_strategy).lower(),
            image_key_prefix=os.getenv("IMAGE_KEY_PREFIX", defaults.image_key_prefix),
            request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds)),
            cors_origins=[origin.strip() for origin in cors.split(",")] if cors else defaults.cors_origins,
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            host=os.getenv("HOST", defaults.host),
            port=int(os.getenv("PORT", defaults.port)),
        )

    def validate_backend(self) -> None:
        """
        Raises:
            ConfigurationError: If the selected backend cannot be built
        """
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigurationError(
                f"Unknown store backend '{self.store_backend}'",
                config_field="STORE_BACKEND",
                config_value=self.store_backend,
            )
        if self.application_id_strategy not in ID_STRATEGIES:
            raise ConfigurationError(
                f"Unknown application id strategy '{self.application_id_strategy}'",
                config_field="APPLICATION_ID_STRATEGY",
                config_value=self.application_id_strategy,
            )
        if self.store_backend == "firebase":
            if not self.firebase_database_url:
                raise ConfigurationError("FIREBASE_DATABASE_URL is required", config_field="FIREBASE_DATABASE_URL")
            if not self.firebase_storage_bucket:
                raise ConfigurationError("FIREBASE_STORAGE_BUCKET is required", config_field="FIREBASE_STORAGE_BUCKET")


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
