"""
Storefront Backend: Notification Schemas
===========================================

What:  The result contract returned by the transactional email service.
Who:   Returned by send_verification_email() / send_password_reset_email()
       to whichever component issues verification or reset tokens.

Outcome semantics:
    success=True,  development=False  → SMTP relay accepted the message
    success=True,  development=True   → message was logged to the console
                                        (no transport, or relay unreachable)
    success=False                     → relay rejected the message; `error`
                                        carries the underlying detail
"""

from typing import Optional

from pydantic import BaseModel, Field


class NotificationOutcome(BaseModel):
    success: bool = Field(description="Whether the caller may treat the notification as delivered")
    message: str = Field(description="Human-readable summary of what happened")
    development: bool = Field(
        default=False,
        description="True when the email was logged to the console instead of sent",
    )
    action_url: Optional[str] = Field(
        default=None,
        description="Verification / reset link; only set in console-fallback mode",
    )
    error: Optional[str] = Field(
        default=None,
        description="Underlying failure detail when success is False",
    )
