"""Document model and the CSV document source."""
