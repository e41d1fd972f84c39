"""Value model — the dynamically-typed scalar exchanged at every boundary."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from sqlcipher_storage.errors import UnsupportedParameterType

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

Scalar = Union[None, bool, int, float, str]


class ValueKind(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"


@dataclass(frozen=True)
class Value:
    """One scalar tagged with its variant.

    ``data`` always holds the Python type matching ``kind``: ``None``,
    ``bool``, ``int``, ``float`` or ``str``.
    """

    kind: ValueKind
    data: Scalar = None

    # -- constructors ----------------------------------------------------------

    @classmethod
    def null(cls) -> "Value":
        return cls(ValueKind.NULL)

    @classmethod
    def boolean(cls, data: bool) -> "Value":
        return cls(ValueKind.BOOLEAN, bool(data))

    @classmethod
    def integer(cls, data: int) -> "Value":
        if not INT64_MIN <= data <= INT64_MAX:
            raise UnsupportedParameterType(f"Integer out of 64-bit range: {data}")
        return cls(ValueKind.INTEGER, int(data))

    @classmethod
    def float_(cls, data: float) -> "Value":
        # SQLite stores NaN as NULL
        if math.isnan(data):
            raise UnsupportedParameterType("NaN cannot be stored")
        return cls(ValueKind.FLOAT, float(data))

    @classmethod
    def text(cls, data: str) -> "Value":
        return cls(ValueKind.TEXT, data)

    # -- host representation ---------------------------------------------------

    @classmethod
    def from_external(cls, obj: Any) -> "Value":
        """Map a host value onto its variant.

        ``bool`` is checked before ``int`` since it is an ``int`` subclass.
        """
        if obj is None:
            return cls.null()
        if isinstance(obj, Value):
            return obj
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            return cls.integer(obj)
        if isinstance(obj, float):
            return cls.float_(obj)
        if isinstance(obj, str):
            return cls.text(obj)
        raise UnsupportedParameterType(
            f"Unsupported parameter value of type {type(obj).__name__}"
        )

    def to_external(self) -> Scalar:
        return self.data

    # -- driver boundary -------------------------------------------------------

    def to_native(self) -> Union[None, int, float, str]:
        """Value handed to the driver's positional bind."""
        if self.kind is ValueKind.BOOLEAN:
            return 1 if self.data else 0
        return self.data

    @classmethod
    def from_column(cls, cell: Any) -> "Value":
        """Map a result cell by its runtime storage class.

        Blobs and any unrecognised type read back as Null.
        """
        if isinstance(cell, str):
            return cls.text(cell)
        if isinstance(cell, bool):
            return cls.integer(int(cell))
        if isinstance(cell, int):
            return cls(ValueKind.INTEGER, cell)
        if isinstance(cell, float):
            return cls.float_(cell)
        return cls.null()

    def __repr__(self) -> str:
        return f"Value.{self.kind.name}({self.data!r})"


def to_values(params: Any) -> list[Value]:
    """Convert a host parameter list; a missing list binds nothing."""
    if params is None:
        return []
    if not isinstance(params, (list, tuple)):
        raise UnsupportedParameterType(
            f"Parameters must be a list, got {type(params).__name__}"
        )
    return [Value.from_external(p) for p in params]


def row_to_external(row: dict[str, Value]) -> dict[str, Scalar]:
    return {name: value.to_external() for name, value in row.items()}
