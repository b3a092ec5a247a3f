from pydantic import field_validator

from natours.models.user import ROLES


class UserValidatorMixin:
    @field_validator('name', check_fields=False)
    @classmethod
    def name_not_empty(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError('Please tell us your name!')
        return v.strip()

    @field_validator('email', check_fields=False)
    @classmethod
    def email_lowercase(cls, v):
        return v.lower() if v is not None else v

    @field_validator('role', check_fields=False)
    @classmethod
    def role_known(cls, v):
        if v is not None and v not in ROLES:
            raise ValueError(f"Role must be one of: {', '.join(ROLES)}")
        return v
