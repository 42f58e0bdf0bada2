"""Append-only transformation journal."""

from typing import Iterable, Iterator, List, Tuple


class TransformationJournal:
    """Ordered record of applied transformation descriptions."""

    def __init__(self, entries: Iterable[str] = ()):
        self._entries: List[str] = []
        self.extend(entries)

    def append(self, entry: str) -> None:
        if not isinstance(entry, str) or not entry:
            raise ValueError("Journal entries must be non-empty strings")
        self._entries.append(entry)

    def extend(self, entries: Iterable[str]) -> None:
        for entry in entries:
            self.append(entry)

    @property
    def entries(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def to_list(self) -> List[str]:
        return list(self._entries)

    def to_markdown(self) -> str:
        if not self._entries:
            return "No transformations applied."
        return "\n".join(f"{i}. {entry}" for i, entry in enumerate(self._entries, start=1))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._entries))

    def __repr__(self) -> str:
        return f"TransformationJournal(entries={len(self._entries)})"
