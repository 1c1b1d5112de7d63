"""OpenAI embedding client."""
