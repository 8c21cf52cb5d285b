"""Ordered, index-addressed editor for the lines of a document."""

from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from backoffice.core.errors import ValidationError

LineT = TypeVar("LineT", bound=BaseModel)


class LineItemEditor(Generic[LineT]):
    """Holds the lines of a document while it is being edited.

    Lines have no identity of their own until the document is persisted;
    they are addressed by position. Every mutation calls ``on_change`` so the
    owning form can recompute its derived totals.
    """

    def __init__(
        self,
        line_type: Type[LineT],
        lines: Optional[Iterable[LineT]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.line_type = line_type
        self._lines: List[LineT] = list(lines or [])
        self._on_change = on_change

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index: int) -> LineT:
        return self._lines[index]

    @property
    def items(self) -> Tuple[LineT, ...]:
        """Snapshot of the current lines, in order."""
        return tuple(self._lines)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._lines):
            raise IndexError(
                f"line index {index} out of range for {len(self._lines)} lines"
            )

    def append(self, line: Optional[LineT] = None) -> int:
        """Add a line at the end; a blank line when none is given.

        Returns:
            Index of the new line
        """
        self._lines.append(line if line is not None else self.line_type())
        self._changed()
        return len(self._lines) - 1

    def remove_at(self, index: int) -> LineT:
        """Remove the line at ``index``; later lines shift up by one."""
        self._check_index(index)
        removed = self._lines.pop(index)
        self._changed()
        return removed

    def update_field(self, index: int, field: str, value: Any) -> LineT:
        """Set one field of the line at ``index``.

        Raises:
            IndexError: If there is no line at ``index``
            ValidationError: If the field is unknown or the value is invalid
        """
        self._check_index(index)
        line = self._lines[index]
        if field not in self.line_type.model_fields:
            raise ValidationError(f"Unknown line field: {field}", field=field)
        try:
            setattr(line, field, value)
        except PydanticValidationError as e:
            raise ValidationError(
                f"line {index + 1}: invalid {field}: {e.errors()[0]['msg']}",
                field=field,
            ) from e
        self._changed()
        return line

    def clear(self) -> None:
        """Drop every line."""
        self._lines.clear()
        self._changed()
