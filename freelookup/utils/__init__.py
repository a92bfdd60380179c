"""Client-side helpers that need no network access."""
