"""Data-service endpoint functions (internal)."""
