"""
API Response Models.

Pydantic models for serializing webhook acknowledgements and errors.
"""

from typing import Optional

from pydantic import BaseModel


class WebhookAck(BaseModel):
    """
    Acknowledgement returned to Stripe with HTTP 200.

    Unset fields are omitted from the response body.
    """
    received: bool = True
    processed: Optional[bool] = None
    error: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "received": True,
                "processed": True
            }
        }


class ErrorResponse(BaseModel):
    """Error body returned with HTTP 400."""
    error: str

    class Config:
        json_schema_extra = {
            "example": {
                "error": "partner not found"
            }
        }
