"""External service integrations (quotation email)."""
