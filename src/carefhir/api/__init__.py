"""JSON REST API over the entity services."""
