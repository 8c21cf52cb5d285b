"""Base model classes and field types shared by records and documents."""

from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict


def blank_to_zero(value: Any) -> Any:
    """Treat blank form input as zero, the way numeric inputs start out empty."""
    if value is None:
        return 0
    if isinstance(value, str) and not value.strip():
        return 0
    return value


def to_text(value: Any) -> Any:
    """Coerce backend scalars to text; ``None`` becomes an empty string."""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def to_optional_text(value: Any) -> Any:
    """Like ``to_text`` but keeps ``None`` and blank strings as ``None``."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_text(value)


# Numeric form field: "" and None read as 0
Amount = Annotated[float, BeforeValidator(blank_to_zero)]

# Free text field: numbers from the backend are kept as their string form
Text = Annotated[str, BeforeValidator(to_text)]
OptionalText = Annotated[Optional[str], BeforeValidator(to_optional_text)]

# Backend-assigned identifier, integer or string depending on the backend
RecordId = Union[int, str]


class Record(BaseModel):
    """Base class for everything exchanged with the backend.

    Assignment is validated so that editors can mutate fields one at a
    time and still get coercion and type checking.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
    )

    id: Optional[RecordId] = None

    def __repr__(self) -> str:
        """Return string representation showing identifying fields only."""
        class_name = self.__class__.__name__
        attrs = ", ".join(
            f"{k}={v!r}"
            for k, v in self.__dict__.items()
            if k in ("id", "name", "item_name") or k.endswith("_no")
        )
        return f"<{class_name}({attrs})>"
