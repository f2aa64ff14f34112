"""Processor credential schemas."""

from pydantic import BaseModel, Field, field_validator

VALID_KEY_PREFIXES = ("sk_", "rk_")


class CredentialUpdate(BaseModel):
    secret_key: str = Field(..., min_length=1, max_length=255)

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("secret_key must not be blank")
        if not value.startswith(VALID_KEY_PREFIXES):
            raise ValueError('secret_key must start with "sk_" or "rk_"')
        return value


class CredentialStatusResponse(BaseModel):
    configured: bool
    key_hint: str | None = None
