# cleancloak/models/common.py
import re
from typing import Annotated, Any, Optional
from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

PHONE_REGEX = re.compile(r"^0[17]\d{8}$")
PHONE_MESSAGE = "Please provide a valid Kenyan phone number"


def is_phone(value: str) -> bool:
    return bool(PHONE_REGEX.match(value or ""))


def _object_id_to_str(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Mongo ObjectIds rendered as hex strings
PyObjectId = Annotated[str, BeforeValidator(_object_id_to_str)]

# "" from form inputs means "no email"
OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(_blank_to_none)]


class CamelModel(BaseModel):
    """snake_case in Python and Mongo, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
    )

    def to_json(self, **kwargs) -> dict:
        return self.model_dump(by_alias=True, mode="json", **kwargs)
