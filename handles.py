"""Field handles.

A handle is the only way the resolver touches a field.  It answers
whether the field can be absent, whether it is absent right now, what
its current value is, and writes a new value back.  The record walker
and the HTTP layer build handles; the resolver never knows what kind of
storage sits behind one.
"""

from __future__ import annotations

from typing import Any, MutableMapping, Protocol, runtime_checkable


@runtime_checkable
class FieldHandle(Protocol):
    """Capability over one integer field."""

    def is_optional(self) -> bool: ...

    def is_absent(self) -> bool: ...

    def get(self) -> int: ...

    def set_absent_to(self, value: int) -> None: ...

    def set(self, value: int) -> None: ...


class ValueHandle:
    """A handle over a boxed value, used for single values and verification."""

    def __init__(self, value: int | None, optional: bool = False) -> None:
        if value is None and not optional:
            raise TypeError("a non-optional field can not be absent")
        self.value = value
        self.optional = optional

    def is_optional(self) -> bool:
        return self.optional

    def is_absent(self) -> bool:
        return self.value is None

    def get(self) -> int:
        if self.value is None:
            raise TypeError("absent field has no value")
        return self.value

    def set_absent_to(self, value: int) -> None:
        self.value = value

    def set(self, value: int) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"ValueHandle(value={self.value!r}, optional={self.optional})"


class AttributeHandle:
    """A handle over an attribute of a record instance."""

    def __init__(self, record: Any, name: str, optional: bool) -> None:
        self.record = record
        self.name = name
        self.optional = optional

    def is_optional(self) -> bool:
        return self.optional

    def is_absent(self) -> bool:
        return getattr(self.record, self.name) is None

    def get(self) -> int:
        value = getattr(self.record, self.name)
        if value is None:
            raise TypeError(f"attribute {self.name!r} is absent")
        return value

    def set_absent_to(self, value: int) -> None:
        setattr(self.record, self.name, value)

    def set(self, value: int) -> None:
        setattr(self.record, self.name, value)


class MappingHandle:
    """A handle over one key of a mutable mapping.

    A missing key and a ``None`` value both count as absent.
    """

    def __init__(
        self, data: MutableMapping[str, Any], key: str, optional: bool
    ) -> None:
        self.data = data
        self.key = key
        self.optional = optional

    def is_optional(self) -> bool:
        return self.optional

    def is_absent(self) -> bool:
        return self.data.get(self.key) is None

    def get(self) -> int:
        value = self.data.get(self.key)
        if value is None:
            raise TypeError(f"key {self.key!r} is absent")
        return value

    def set_absent_to(self, value: int) -> None:
        self.data[self.key] = value

    def set(self, value: int) -> None:
        self.data[self.key] = value
