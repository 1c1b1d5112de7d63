"""HTTP trigger server for CSV ingestion and retrieval-augmented answers."""
