import re
from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, Field

MAX_EMAIL_LENGTH = 1024
MAX_USER_IDS = 50
OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")


def check_email(value: str) -> str:
    """Reject anything that is not a well-formed address of at most 1024 characters.

    Only syntax is checked; reserved domains such as ``.local`` are allowed.
    The address is returned exactly as given so lookups match what was stored.
    """
    if len(value) > MAX_EMAIL_LENGTH:
        raise ValueError(f"email must be at most {MAX_EMAIL_LENGTH} characters")
    try:
        validate_email(value, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError as e:
        raise ValueError(f"value is not a valid email address: {e}") from e
    return value


def check_object_id(value: str) -> str:
    if not OBJECT_ID_RE.fullmatch(value):
        raise ValueError("user id must be a 24-character hex object id")
    return value


def check_user_ids(values: list[str]) -> list[str]:
    if len(values) > MAX_USER_IDS:
        raise ValueError(f"at most {MAX_USER_IDS} user ids may be requested")
    return [check_object_id(value) for value in values]


Email = Annotated[str, AfterValidator(check_email)]
ObjectId = Annotated[str, AfterValidator(check_object_id)]


class GetUserIdRequest(BaseModel):
    email: Email


class GetUserDataRequest(BaseModel):
    user_ids: list[ObjectId] = Field(alias="userIds", max_length=MAX_USER_IDS)
