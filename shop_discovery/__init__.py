"""Shop discovery API."""
