"""Ingestion helpers: defensive parsing of data-service rows."""
