"""Application layer: DTOs shared by the API routes."""
