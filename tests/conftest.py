import pytest
from unittest.mock import AsyncMock
from httpx import AsyncClient, ASGITransport

from chatbot_server.config import Settings
from chatbot_server.main import create_app
from chatbot_server.api.dependencies import (
    get_chat_model,
    get_embedder,
    get_pinecone_index,
)
from chatbot_server.embeddings.embedder import Embedder
from chatbot_server.llm.client import ChatModelClient
from chatbot_server.vectorstore import PineconeIndex

ALLOWED_ORIGIN = "http://localhost:3000"
EMBEDDING_DIM = 3


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("id,text\n1,foo\n2,bar\n", encoding="utf-8")
    return path


@pytest.fixture
def test_settings(csv_file):
    return Settings(
        _env_file=None,
        frontend_url=ALLOWED_ORIGIN,
        openai_api_key="sk-test",
        pinecone_api_key="pc-test",
        pinecone_index_name="test-index",
        csv_path=str(csv_file),
    )


@pytest.fixture
def mock_embedder():
    mock = AsyncMock(spec=Embedder)

    async def _embed(texts, batch_size=None):
        return [[0.1] * EMBEDDING_DIM for _ in texts]

    mock.embed.side_effect = _embed
    mock.embed_query.return_value = [0.1] * EMBEDDING_DIM
    return mock


@pytest.fixture
def mock_index():
    mock = AsyncMock(spec=PineconeIndex)

    async def _upsert(vectors, namespace):
        return len(vectors)

    mock.upsert.side_effect = _upsert
    mock.query.return_value = []
    mock.describe_index_stats.return_value = {
        "namespaces": {"data1": {"vectorCount": 2}},
        "dimension": EMBEDDING_DIM,
        "totalVectorCount": 2,
    }
    return mock


@pytest.fixture
def mock_chat_model():
    mock = AsyncMock(spec=ChatModelClient)
    mock.complete.return_value = "We have two cars: foo and bar."
    return mock


@pytest.fixture
def app(test_settings, mock_embedder, mock_index, mock_chat_model):
    application = create_app(test_settings)
    application.dependency_overrides[get_embedder] = lambda: mock_embedder
    application.dependency_overrides[get_pinecone_index] = lambda: mock_index
    application.dependency_overrides[get_chat_model] = lambda: mock_chat_model
    yield application
    application.dependency_overrides = {}


@pytest.fixture
def job_runner(app):
    return app.state.job_runner


@pytest.fixture
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
