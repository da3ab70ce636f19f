"""Field-presence and format checks for inbound payloads.

Each validator takes the raw payload mapping (wire field names) and returns a
``ValidationResult``. Absent, ``None`` and empty values are read as ``""``.
Every rule runs, so a single call reports all failing fields at once.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from email_validator import EmailNotValidError, validate_email

from eventhub.config import settings

ALPHA_RE = re.compile(r"^[A-Za-z]+$")


@dataclass
class ValidationResult:
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, set, dict)) and not value:
        return ""
    return str(value)


def _is_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _require(data: Mapping[str, Any], errors: Dict[str, str], fields: Dict[str, str]) -> None:
    for name, label in fields.items():
        if not _as_text(data.get(name)):
            errors[name] = f"{label} field is required"


def validate_register(data: Mapping[str, Any]) -> ValidationResult:
    errors: Dict[str, str] = {}
    username = _as_text(data.get("username"))
    email = _as_text(data.get("email"))
    password = _as_text(data.get("password"))
    confirm_password = _as_text(data.get("confirmPassword"))

    if not username:
        errors["username"] = "Username field is required"
    elif not 3 <= len(username) <= 20:
        errors["username"] = "Username must be between 3 and 20 characters"
    elif not ALPHA_RE.match(username):
        errors["username"] = "Username must be Alpha"

    if not email:
        errors["email"] = "Email field is required"
    elif not _is_email(email):
        errors["email"] = "Email is invalid"

    if not password:
        errors["password"] = "Password field is required"
    elif len(password) < settings.PASSWORD_MIN_LENGTH:
        errors["password"] = f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"

    if not confirm_password:
        errors["confirmPassword"] = "Confirm password field is required"
    elif confirm_password != password:
        errors["confirmPassword"] = "Passwords must match"

    return ValidationResult(errors)


def validate_event(data: Mapping[str, Any]) -> ValidationResult:
    errors: Dict[str, str] = {}
    _require(data, errors, {
        "title": "Title",
        "description": "Description",
        "category": "Category",
        "date": "Date",
    })
    return ValidationResult(errors)


def validate_login(data: Mapping[str, Any]) -> ValidationResult:
    errors: Dict[str, str] = {}
    _require(data, errors, {"email": "Email", "password": "Password"})
    return ValidationResult(errors)
