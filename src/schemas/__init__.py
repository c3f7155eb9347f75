"""Pydantic schemas for API requests and ledger views."""
