from __future__ import annotations

from typing import Any, Iterable


def _text(value: Any) -> str:
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


class JCardValue:
    """The value part of a jCard property: everything after the data type.

    ``single("foo")`` is ``"foo"``, ``multi(["a", "b"])`` is ``"a", "b"`` and
    ``structured([...])`` is one JSON array whose items are a string, or a
    nested array when a component holds several values.
    """

    def __init__(self, values: Iterable[Any] = ()):
        self.values = list(values)

    @classmethod
    def single(cls, value: Any) -> JCardValue:
        return cls([value])

    @classmethod
    def multi(cls, values: Iterable[Any]) -> JCardValue:
        return cls(values)

    @classmethod
    def structured(cls, components: Iterable[Any]) -> JCardValue:
        array: list[Any] = []
        for component in components:
            if component is None:
                array.append("")
            elif isinstance(component, (list, tuple)):
                items = [c for c in component if c is not None]
                if not items:
                    array.append("")
                elif len(items) == 1:
                    array.append(items[0])
                else:
                    array.append(list(items))
            else:
                array.append(component)
        return cls([array])

    def as_single(self) -> str:
        if not self.values:
            return ""
        first = self.values[0]
        if isinstance(first, list):
            return _text(first[0]) if first else ""
        return _text(first)

    def as_multi(self) -> list[str]:
        return [_text(v) for v in self.values if v is not None and not isinstance(v, list)]

    def as_structured(self) -> list[list[str]]:
        if not self.values:
            return []
        first = self.values[0]
        if not isinstance(first, list):
            text = _text(first)
            return [[text]] if text else []

        components: list[list[str]] = []
        for item in first:
            if isinstance(item, list):
                components.append([_text(v) for v in item if v is not None and _text(v) != ""])
            else:
                text = _text(item)
                components.append([text] if text else [])
        return components

    def to_json(self) -> list[Any]:
        return list(self.values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, JCardValue):
            return NotImplemented
        return self.values == other.values

    def __repr__(self) -> str:
        return f"JCardValue({self.values!r})"
