import pytest

from PartsCatalogue.clients.firebase import RealtimeDatabaseClient, StorageClient
from PartsCatalogue.clients.memory_store import InMemoryBlobStore, InMemoryDocumentStore
from PartsCatalogue.config.settings import Settings
from PartsCatalogue.dependencies import build_blob_store, build_document_store
from PartsCatalogue.exceptions import ConfigurationError


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("STORE_BACKEND", "APPLICATIONS_PATH", "CORS_ORIGINS", "PORT"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.store_backend == "memory"
        assert settings.parts_base_path == "material_summary_2025"
        assert settings.parts_override_path == "Parts"
        assert settings.bom_path == "BoM"
        assert settings.applications_path == "PartApplications"
        assert settings.cors_origins == ["*"]
        assert settings.port == 8080

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "Firebase")
        monkeypatch.setenv("FIREBASE_DATABASE_URL", "https://db.example.com")
        monkeypatch.setenv("FIREBASE_STORAGE_BUCKET", "bucket.appspot.com")
        monkeypatch.setenv("APPLICATIONS_PATH", "partApplications")
        monkeypatch.setenv("APPLICATION_ID_STRATEGY", "sequential")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.example.com, http://b.example.com")
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.store_backend == "firebase"
        assert settings.applications_path == "partApplications"
        assert settings.application_id_strategy == "sequential"
        assert settings.cors_origins == ["http://a.example.com", "http://b.example.com"]
        assert settings.request_timeout_seconds == 5.0
        assert settings.log_level == "DEBUG"
        settings.validate_backend()

    def test_firebase_backend_requires_database_url(self):
        settings = Settings(store_backend="firebase", firebase_storage_bucket="bucket")

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_backend()
        assert exc_info.value.config_field == "FIREBASE_DATABASE_URL"

    def test_firebase_backend_requires_bucket(self):
        settings = Settings(store_backend="firebase", firebase_database_url="https://db.example.com")

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_backend()
        assert exc_info.value.config_field == "FIREBASE_STORAGE_BUCKET"

    def test_unknown_backend_and_strategy(self):
        with pytest.raises(ConfigurationError):
            Settings(store_backend="sqlite").validate_backend()
        with pytest.raises(ConfigurationError):
            Settings(application_id_strategy="uuid").validate_backend()


class TestStoreFactories:

    def test_memory_backend(self):
        settings = Settings()
        assert isinstance(build_document_store(settings), InMemoryDocumentStore)
        assert isinstance(build_blob_store(settings), InMemoryBlobStore)

    def test_firebase_backend(self):
        settings = Settings(
            store_backend="firebase",
            firebase_database_url="https://db.example.com",
            firebase_storage_bucket="bucket.appspot.com",
            firebase_auth_token="token",
        )

        document_store = build_document_store(settings)
        blob_store = build_blob_store(settings)

        assert isinstance(document_store, RealtimeDatabaseClient)
        assert isinstance(blob_store, StorageClient)
        assert blob_store.public_base_url == "https://firebasestorage.googleapis.com/v0/b/bucket.appspot.com/o"

    def test_invalid_configuration_raises(self):
        with pytest.raises(ConfigurationError):
            build_document_store(Settings(store_backend="firebase"))

    def test_invalid_database_url_raises_configuration_error(self):
        settings = Settings(
            store_backend="firebase",
            firebase_database_url="ftp://db.example.com",
            firebase_storage_bucket="bucket.appspot.com",
        )

        with pytest.raises(ConfigurationError) as exc_info:
            build_document_store(settings)
        assert exc_info.value.config_field == "FIREBASE_DATABASE_URL"

    def test_invalid_timeout_raises_configuration_error(self):
        settings = Settings(
            store_backend="firebase",
            firebase_database_url="https://db.example.com",
            firebase_storage_bucket="bucket.appspot.com",
            request_timeout_seconds=0,
        )

        with pytest.raises(ConfigurationError):
            build_blob_store(settings)
