"""Infrastructure adapters: logging, database, metrics, scheduling."""
