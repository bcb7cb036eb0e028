"""Management CLI for reminder-service."""
