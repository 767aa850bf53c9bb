"""MediEcho health journal API."""
