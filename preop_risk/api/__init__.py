"""HTTP API for the pre-operative risk engine."""
