"""Common Pydantic schemas used across the API."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error body returned for every 4xx/5xx response."""

    error: str
