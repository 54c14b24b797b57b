"""User Schemas — admin request bodies for account management."""

from pydantic import BaseModel, field_validator

from storefront.core.domain_types import Role

_ROLE_NAMES = ", ".join(r.value for r in Role)


class RoleUpdate(BaseModel):
    role: Role

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        if isinstance(v, str) and v.strip().upper() in Role.__members__:
            return v.strip().upper()
        raise ValueError(f"Role must be one of: {_ROLE_NAMES}")
