"""OpenAI chat completion client."""
