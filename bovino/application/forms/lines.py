from __future__ import annotations

from typing import Any, ClassVar


class LineItemsMixin:
    """Editable detail lines kept next to a form's header fields.

    Each line is a plain dict with exactly the keys of `blank_line`.
    """

    blank_line: ClassVar[dict[str, Any]] = {}

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.lines: list[dict[str, Any]] = []

    def _check_keys(self, keys) -> None:
        unknown = set(keys) - set(self.blank_line)
        if unknown:
            raise KeyError(", ".join(sorted(unknown)))

    def add_line(self, **values: Any) -> int:
        self._check_keys(values)
        self.lines.append({**self.blank_line, **values})
        return len(self.lines) - 1

    def update_line(self, index: int, **changes: Any) -> None:
        self._check_keys(changes)
        self.lines[index].update(changes)

    def remove_line(self, index: int) -> None:
        del self.lines[index]

    def reset(self) -> None:
        super().reset()
        self.lines = []
