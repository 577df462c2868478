"""
schemas/errors.py - Structured error response model

The body sent for every rejected request and by ResponseWriter.write_errors.

Called by: jsonbody/writer.py
Depends on: pydantic
"""

from pydantic import BaseModel, Field


class ErrorEnvelope(BaseModel):
    errors: list[str] = Field(default_factory=list)
