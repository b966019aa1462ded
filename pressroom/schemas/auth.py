"""
Pressroom Backend: Authentication Schemas
=========================================

What:  Signup/login bodies, the login token response and the verified identity.
Why:   `Identity` is what the token verifier hands to handlers; routes never see
       the raw JWT claims.
"""

import uuid

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """
    Body of POST /signup and POST /login.

    Blank strings are rejected (400) the same way as missing fields.
    """
    username: str = Field(min_length=1, max_length=150, description="Unique login name")
    password: str = Field(min_length=1, description="Plain-text password (hashed server-side)")


class SignupResponse(BaseModel):
    message: str = Field(default="User created successfully")
    id: uuid.UUID = Field(description="Identifier of the new user")
    username: str


class TokenResponse(BaseModel):
    token: str = Field(description="Signed bearer token, valid for one hour")


class Identity(BaseModel):
    """Verified caller identity extracted from a bearer token."""
    user_id: uuid.UUID
    username: str

    model_config = {"frozen": True}
