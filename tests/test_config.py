import pytest
from pydantic import ValidationError

from chatbot_server.config import PipelineOptions, Settings

ENV_KEYS = [
    "PORT",
    "FRONTEND_URL",
    "OPENAI_API_KEY",
    "PINECONE_API_KEY",
    "PINECONE_INDEX_NAME",
    "NAMESPACE",
    "QUESTION",
    "BATCH_CONCURRENCY",
    "BATCH_SIZE",
    "CSV_PATH",
    "RETRIEVAL_TOP_K",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings(_env_file=None)

    assert settings.port == 9000
    assert settings.frontend_url is None
    assert settings.embedding_model == "text-embedding-3-small"
    assert settings.chat_model == "gpt-3.5-turbo"
    assert settings.chat_temperature == 0.0

    options = settings.pipeline_options()
    assert options == PipelineOptions(
        namespace="data1",
        question="Show me the all cars you have with all details?",
        batch_concurrency=5,
        batch_size=1000,
        csv_path="data.csv",
        retrieval_top_k=4,
    )


def test_reads_environment(clean_env):
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("FRONTEND_URL", "http://localhost:5173")
    clean_env.setenv("PINECONE_INDEX_NAME", "cars")
    clean_env.setenv("OPENAI_API_KEY", "sk-env")

    settings = Settings(_env_file=None)

    assert settings.port == 8080
    assert settings.frontend_url == "http://localhost:5173"
    assert settings.pinecone_index_name == "cars"
    assert settings.openai_api_key.get_secret_value() == "sk-env"


def test_secrets_are_masked(clean_env):
    settings = Settings(_env_file=None, openai_api_key="sk-hidden")
    assert "sk-hidden" not in repr(settings)


def test_missing_settings(clean_env):
    assert Settings(_env_file=None).missing_settings() == [
        "OPENAI_API_KEY",
        "PINECONE_API_KEY",
        "PINECONE_INDEX_NAME",
    ]
    complete = Settings(
        _env_file=None,
        openai_api_key="sk",
        pinecone_api_key="pc",
        pinecone_index_name="cars",
    )
    assert complete.missing_settings() == []


def test_batch_size_above_pinecone_limit_is_rejected(clean_env):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, batch_size=1001).pipeline_options()


def test_pipeline_options_are_frozen(clean_env):
    options = Settings(_env_file=None).pipeline_options()
    with pytest.raises(ValidationError):
        options.namespace = "other"


@pytest.mark.parametrize(
    "frontend_url, expected",
    [
        (None, []),
        ("http://localhost:3000", ["http://localhost:3000"]),
        ("http://localhost:3000/", ["http://localhost:3000"]),
    ],
)
def test_allowed_origins(clean_env, frontend_url, expected):
    settings = Settings(_env_file=None, frontend_url=frontend_url)
    assert settings.allowed_origins() == expected
