"""Tests for configuration loading."""
import pytest

from pgschemadoc.config import ExtractConfig

ENV_VARS = [
    "DATABASE_URL",
    "PGSCHEMADOC_DATABASE_URL",
    "PGSCHEMADOC_NAMESPACE",
    "PGSCHEMADOC_EXCLUDE",
    "PGSCHEMADOC_QUERY_TIMEOUT",
    "PGSCHEMADOC_MARKDOWN_TEMPLATE",
    "PGSCHEMADOC_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No pgschemadoc variables and no .env file in the working directory."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults():
    config = ExtractConfig(database_url="postgresql://localhost/app")

    assert config.namespace == "public"
    assert config.exclude == []
    assert config.query_timeout is None
    assert config.logging.level == "WARNING"


def test_rejects_non_postgres_url():
    with pytest.raises(ValueError, match="database_url"):
        ExtractConfig(database_url="mysql://localhost/app")


def test_rejects_non_positive_timeout():
    with pytest.raises(ValueError):
        ExtractConfig(database_url="postgresql://localhost/app", query_timeout=0)


def test_from_env(clean_env):
    clean_env.setenv("PGSCHEMADOC_DATABASE_URL", "postgresql://app@db/app")
    clean_env.setenv("PGSCHEMADOC_NAMESPACE", "billing")
    clean_env.setenv("PGSCHEMADOC_EXCLUDE", "logs, schema_migrations,")
    clean_env.setenv("PGSCHEMADOC_QUERY_TIMEOUT", "2.5")
    clean_env.setenv("PGSCHEMADOC_LOG_LEVEL", "debug")

    config = ExtractConfig.from_env()

    assert config.database_url == "postgresql://app@db/app"
    assert config.namespace == "billing"
    assert config.exclude == ["logs", "schema_migrations"]
    assert config.query_timeout == 2.5
    assert config.logging.level == "DEBUG"


def test_from_env_falls_back_to_database_url(clean_env):
    clean_env.setenv("DATABASE_URL", "postgres://fallback/app")

    assert ExtractConfig.from_env().database_url == "postgres://fallback/app"


def test_from_env_overrides_win(clean_env):
    clean_env.setenv("PGSCHEMADOC_DATABASE_URL", "postgresql://env/app")

    config = ExtractConfig.from_env(database_url="postgresql://flag/app", namespace=None)

    assert config.database_url == "postgresql://flag/app"
    assert config.namespace == "public"


def test_from_env_without_url(clean_env):
    with pytest.raises(ValueError, match="No database URL"):
        ExtractConfig.from_env()


def test_from_yaml(tmp_path):
    path = tmp_path / "pgschemadoc.yaml"
    path.write_text(
        "database_url: postgresql://docs@localhost/app\n"
        "namespace: inventory\n"
        "exclude:\n"
        "  - logs\n"
        "logging:\n"
        "  level: INFO\n"
    )

    config = ExtractConfig.from_yaml(path)

    assert config.namespace == "inventory"
    assert config.exclude == ["logs"]
    assert config.logging.level == "INFO"


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ExtractConfig.from_yaml(tmp_path / "nope.yaml")


def test_from_yaml_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    with pytest.raises(ValueError, match="Empty configuration"):
        ExtractConfig.from_yaml(path)


@pytest.mark.parametrize("url,expected", [
    ("postgresql://user:secret@db:5432/app", "postgresql://user:***@db:5432/app"),
    ("postgresql://user@db/app", "postgresql://user@db/app"),
    ("postgresql:///app", "postgresql:///app"),
])
def test_redacted_url(url, expected):
    assert ExtractConfig(database_url=url).redacted_url() == expected


def test_from_yaml_without_url_uses_override(clean_env, tmp_path):
    path = tmp_path / "pgschemadoc.yaml"
    path.write_text("namespace: inventory\nlogging:\n  format: '%(message)s'\n")

    config = ExtractConfig.from_yaml(
        path,
        database_url="postgresql://flag/app",
        namespace=None,
        logging={"level": "DEBUG"},
    )

    assert config.database_url == "postgresql://flag/app"
    assert config.namespace == "inventory"
    assert config.logging.level == "DEBUG"
    assert config.logging.format == "%(message)s"


def test_from_yaml_file_wins_over_environment(clean_env, tmp_path):
    clean_env.setenv("PGSCHEMADOC_DATABASE_URL", "postgresql://env/app")
    clean_env.setenv("PGSCHEMADOC_NAMESPACE", "from_env")
    path = tmp_path / "pgschemadoc.yaml"
    path.write_text("namespace: from_file\n")

    config = ExtractConfig.from_yaml(path)

    assert config.database_url == "postgresql://env/app"
    assert config.namespace == "from_file"


def test_from_yaml_without_any_url(clean_env, tmp_path):
    path = tmp_path / "pgschemadoc.yaml"
    path.write_text("namespace: inventory\n")

    with pytest.raises(ValueError, match="No database URL"):
        ExtractConfig.from_yaml(path)
