"""Database layer for PostGate."""
