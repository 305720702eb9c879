"""HTTP middleware for PostGate."""
