import pytest

from buildinfo.core.config import Settings


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """Run without a .env file and without BUILDINFO_* variables."""
    monkeypatch.chdir(tmp_path)
    for key in (
        "BUILDINFO_LOG_LEVEL",
        "BUILDINFO_ENDPOINT_PATH",
        "BUILDINFO_DISTRIBUTION",
        "BUILDINFO_GIT_BINARY",
        "BUILDINFO_GIT_TIMEOUT",
        "BUILDINFO_DEFAULT_TAG",
    ):
        monkeypatch.delenv(key, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.endpoint_path == "/buildinfo"
        assert settings.distribution is None
        assert settings.git_binary == "git"
        assert settings.git_timeout is None
        assert settings.default_tag == "0.0.0"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("BUILDINFO_ENDPOINT_PATH", "/version")
        monkeypatch.setenv("BUILDINFO_GIT_TIMEOUT", "2.5")
        monkeypatch.setenv("BUILDINFO_DISTRIBUTION", "acme-app")

        settings = Settings()

        assert settings.endpoint_path == "/version"
        assert settings.git_timeout == 2.5
        assert settings.distribution == "acme-app"

    def test_reads_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("BUILDINFO_DEFAULT_TAG=v0.0.1\n")

        assert Settings().default_tag == "v0.0.1"

    def test_ignores_unrelated_env_file_entries(self, tmp_path):
        (tmp_path / ".env").write_text("DATABASE_URL=postgresql://localhost/db\n")

        assert Settings().default_tag == "0.0.0"

    def test_invalid_timeout(self, monkeypatch):
        monkeypatch.setenv("BUILDINFO_GIT_TIMEOUT", "soon")

        with pytest.raises(ValueError):
            Settings()
