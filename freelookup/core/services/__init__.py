"""Application services (lookups, batches, skills)."""
