"""Prompt template and the ingestion / answer pipelines."""
