"""Infrastructure — database sessions, structured logging, SQL migration runner."""
