"""API endpoint modules."""
