"""Live position ingest."""
