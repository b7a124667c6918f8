"""
# `storefront/schemas/user.py` — Auth Form Schema Documentation

## General
Pydantic models for the auth forms (login, signup, password reset, new password).
The user itself stays a plain Firestore dict (`name`, `email`, `password` hash,
embedded `cart`). Form fields keep the names of the HTML inputs so that `fields`
on a validation error points at the input to highlight.

---

## Forms
| Form              | Fields | Rules |
|-------------------|--------|-------|
| `LoginForm`       | email, password | valid e-mail; password >= 5 alphanumeric chars |
| `SignupForm`      | name, email, password, confirm_password | as above; name not blank; passwords match |
| `ResetForm`       | email | valid e-mail |
| `NewPasswordForm` | user_id, password_token, password | password >= 5 alphanumeric chars |

`parse_form(FormCls, data)` validates a dict of raw form values and raises
`storefront.core.errors.ValidationError` with the first message and every invalid field.
"""
import re
from typing import Annotated, Any, Dict, Type, TypeVar

import pydantic
from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, Field, field_validator, ValidationInfo

from storefront.core.errors import ValidationError

PASSWORD_REGEX = re.compile(r'^[A-Za-z0-9]{5,}$')

F = TypeVar("F", bound=BaseModel)


def _clean_email(v: str) -> str:
    try:
        return validate_email((v or "").strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        raise ValueError("Please enter a valid email.")


def _check_password(v: str) -> str:
    if not PASSWORD_REGEX.fullmatch(v or ""):
        raise ValueError("Please enter a password with only numbers and text and at least 5 characters.")
    return v


EmailField = Annotated[str, AfterValidator(_clean_email)]
PasswordField = Annotated[str, AfterValidator(_check_password)]


class LoginForm(BaseModel):
    email: EmailField
    password: PasswordField


class SignupForm(BaseModel):
    name: str
    email: EmailField
    password: PasswordField
    confirm_password: str

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Please enter your name.")
        return v

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, v: str, info: ValidationInfo) -> str:
        if v != info.data.get("password"):
            raise ValueError("Passwords have to match!")
        return v


class ResetForm(BaseModel):
    email: EmailField


class NewPasswordForm(BaseModel):
    user_id: str = Field(..., min_length=1)
    password_token: str = Field(..., min_length=1)
    password: PasswordField


def parse_form(form_cls: Type[F], data: Dict[str, Any]) -> F:
    try:
        return form_cls(**data)
    except pydantic.ValidationError as exc:
        errors = exc.errors()
        message = errors[0]["msg"].removeprefix("Value error, ")
        fields = [str(err["loc"][0]) for err in errors if err.get("loc")]
        raise ValidationError(message, fields)
