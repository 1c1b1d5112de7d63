"""
Pipeline Tests

Ingestion and answer pipelines run against mocked collaborators.
"""

import logging

import pytest

from chatbot_server.core.errors import DocumentSourceError, VectorStoreError
from chatbot_server.rag.pipelines import namespace_filter, run_answer, run_ingestion
from chatbot_server.vectorstore import QueryMatch

QUESTION = "Show me the all cars you have with all details?"


@pytest.fixture
def options(test_settings):
    return test_settings.pipeline_options()


class TestIngestion:
    async def test_two_rows_give_one_upsert_with_two_records(self, options, mock_embedder, mock_index):
        count = await run_ingestion(options, mock_embedder, mock_index)

        assert count == 2
        mock_embedder.embed.assert_awaited_once()
        (texts,), _ = mock_embedder.embed.call_args
        assert texts == ["id: 1\ntext: foo", "id: 2\ntext: bar"]

        mock_index.upsert.assert_awaited_once()
        args, kwargs = mock_index.upsert.call_args
        vectors = args[0]
        assert kwargs["namespace"] == "data1"
        assert len(vectors) == 2
        assert all(v.metadata["namespace"] == "data1" for v in vectors)
        assert [v.metadata["text"] for v in vectors] == texts

    async def test_missing_csv_aborts_before_embedding(self, options, mock_embedder, mock_index, tmp_path):
        options = options.model_copy(update={"csv_path": str(tmp_path / "missing.csv")})

        with pytest.raises(DocumentSourceError):
            await run_ingestion(options, mock_embedder, mock_index)

        mock_embedder.embed.assert_not_awaited()
        mock_index.upsert.assert_not_awaited()

    async def test_upsert_failure_propagates(self, options, mock_embedder, mock_index):
        mock_index.upsert.side_effect = VectorStoreError("boom")

        with pytest.raises(VectorStoreError):
            await run_ingestion(options, mock_embedder, mock_index)


class TestAnswer:
    async def test_empty_index_still_calls_chat_model(self, options, mock_embedder, mock_index, mock_chat_model):
        mock_index.query.return_value = []

        answer = await run_answer(options, mock_embedder, mock_index, mock_chat_model)

        assert answer == "We have two cars: foo and bar."
        mock_chat_model.complete.assert_awaited_once_with(
            "Answer the question based only on the following context:\n"
            "\n"
            f"Question: {QUESTION}"
        )

    async def test_retrieval_is_filtered_to_namespace(self, options, mock_embedder, mock_index, mock_chat_model):
        await run_answer(options, mock_embedder, mock_index, mock_chat_model)

        mock_embedder.embed_query.assert_awaited_once_with(QUESTION)
        _, kwargs = mock_index.query.call_args
        assert kwargs["namespace"] == "data1"
        assert kwargs["top_k"] == 4
        assert kwargs["filter"] == namespace_filter("data1") == {"namespace": {"$eq": "data1"}}

    async def test_retrieved_documents_become_context(self, options, mock_embedder, mock_index, mock_chat_model):
        mock_index.query.return_value = [
            QueryMatch(id="1", score=0.8, metadata={"text": "id: 1\ntext: foo", "namespace": "data1"}),
            QueryMatch(id="2", score=0.7, metadata={"text": "id: 2\ntext: bar", "namespace": "data1"}),
        ]

        await run_answer(options, mock_embedder, mock_index, mock_chat_model)

        (prompt,), _ = mock_chat_model.complete.call_args
        assert prompt == (
            "Answer the question based only on the following context:\n"
            "id: 1\ntext: foo\n\nid: 2\ntext: bar\n"
            f"Question: {QUESTION}"
        )

    async def test_answer_is_logged(self, options, mock_embedder, mock_index, mock_chat_model, caplog):
        caplog.set_level(logging.INFO, logger="chatbot.pipeline")

        await run_answer(options, mock_embedder, mock_index, mock_chat_model)

        assert "Final answer: We have two cars: foo and bar." in caplog.messages
