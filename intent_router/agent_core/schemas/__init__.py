"""Pydantic schemas for the agent core domain."""
