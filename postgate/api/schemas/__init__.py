"""Request and response schemas for the PostGate API."""
