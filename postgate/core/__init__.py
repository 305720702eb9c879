"""Core domain logic for PostGate."""
