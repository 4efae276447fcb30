"""Base model for MongoDB documents."""
from typing import Annotated, Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def to_object_id(value: Optional[str]) -> Any:
    """Store valid hex ids as ObjectId, leave anything else untouched."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def stringify_ids(value: Any) -> Any:
    """Recursively replace ObjectId values with their hex string."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: stringify_ids(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [stringify_ids(item) for item in value]
    return value


def same_id(left: Any, right: Any) -> bool:
    """Compare two ids regardless of ObjectId/str representation."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


# Document ids are ObjectId in the store and str in the domain
IdStr = Annotated[str, BeforeValidator(lambda v: str(v) if isinstance(v, ObjectId) else v)]


class MongoModel(BaseModel):
    """
    Base model for MongoDB documents and sub-documents.

    Field names are snake_case in Python and camelCase in the store. Unknown
    keys are kept so a load/save cycle never drops fields owned by other
    parts of the system (checkout, wallet, ...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        validate_assignment=True,
        validate_default=True,
        use_enum_values=True,
        arbitrary_types_allowed=True,
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Create model instance from a stored document."""
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to a camelCase dictionary ready for the store."""
        return self.model_dump(by_alias=True, exclude_none=True)
