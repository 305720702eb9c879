"""HTTP API for PostGate."""
