"""Pydantic request/response schemas for the Drivigo API."""
