"""Request schemas — pydantic contracts for JSON bodies (camelCase on the wire)."""
