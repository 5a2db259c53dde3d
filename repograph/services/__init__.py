"""Business-logic services: extraction, ingestion, and search."""
