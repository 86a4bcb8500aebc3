from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .messages import validate_message


@dataclass(frozen=True)
class ValidationWarning:
    code: int | None
    message: str

    @classmethod
    def of(cls, code: int, *args) -> ValidationWarning:
        return cls(code, validate_message(code, *args))

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"W{self.code:02d}: {self.message}"


class ValidationWarnings:
    """Warnings grouped by the property that caused them.

    Properties are keyed by identity, so two equal-valued properties keep
    their warnings apart. Warnings about the vCard as a whole are stored
    under ``None``.
    """

    def __init__(self):
        self._entries: dict[int, tuple[object | None, list[ValidationWarning]]] = {}

    def add(self, prop, warnings: ValidationWarning | Iterable[ValidationWarning]) -> None:
        if isinstance(warnings, ValidationWarning):
            warnings = [warnings]
        warnings = list(warnings)
        if not warnings:
            return
        key = id(prop) if prop is not None else 0
        entry = self._entries.setdefault(key, (prop, []))
        entry[1].extend(warnings)

    def get(self, prop) -> list[ValidationWarning]:
        key = id(prop) if prop is not None else 0
        entry = self._entries.get(key)
        return list(entry[1]) if entry else []

    def by_property(self, cls: type | None) -> list[ValidationWarning]:
        """Warnings of every property of class ``cls`` (``None`` for the vCard itself)."""
        out: list[ValidationWarning] = []
        for prop, warnings in self._entries.values():
            if cls is None:
                if prop is None:
                    out.extend(warnings)
            elif isinstance(prop, cls):
                out.extend(warnings)
        return out

    def __iter__(self) -> Iterator[tuple[object | None, list[ValidationWarning]]]:
        for prop, warnings in self._entries.values():
            yield prop, list(warnings)

    def __len__(self) -> int:
        return sum(len(w) for _, w in self._entries.values())

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __str__(self) -> str:
        lines = []
        for prop, warnings in self._entries.values():
            label = "" if prop is None else f"[{type(prop).__name__}] | "
            for warning in warnings:
                lines.append(f"{label}{warning}")
        return "\n".join(lines)
