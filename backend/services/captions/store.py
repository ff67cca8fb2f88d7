"""Immutable, validated cue store."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from shared.models import Cue, RawCue
from shared.utils import setup_logging

from .errors import ValidationError

logger = setup_logging("caption-store")

CueInput = RawCue | Cue | Mapping[str, Any]


def _coerce_raw(raw: Any) -> RawCue:
    if isinstance(raw, RawCue):
        return raw
    if isinstance(raw, Cue):
        return RawCue(id=raw.id, start=raw.start, end=raw.end, text=raw.text)
    if isinstance(raw, Mapping):
        return RawCue.model_validate(dict(raw))
    return RawCue.model_validate(raw, from_attributes=True)


def _first_error(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


class CueStore:
    """Ordered sequence of cues, sorted by start time (then id).

    A store never changes after construction. Edits go through ``build``
    and produce a new store, so a reader holding a reference always sees a
    complete, valid sequence. Cues are frozen models, so handing them out
    does not expose mutable state.
    """

    __slots__ = ("_cues",)

    def __init__(self, cues: Iterable[Cue] = ()) -> None:
        self._cues: tuple[Cue, ...] = tuple(sorted(cues, key=lambda cue: (cue.start, cue.id)))

    @classmethod
    def empty(cls) -> "CueStore":
        return cls(())

    @classmethod
    def build(cls, raw_cues: Iterable[CueInput]) -> "CueStore":
        """Validate raw cue records and return a sorted store.

        Records without an id get the next unused positive integer, in input
        order. The first offending record (by input position) is reported.

        Raises:
            ValidationError: invalid interval, empty text, bad field types or
                duplicate ids.
        """
        records: list[RawCue] = []
        for position, raw in enumerate(raw_cues):
            try:
                records.append(_coerce_raw(raw))
            except PydanticValidationError as exc:
                raise ValidationError(
                    f"Invalid cue at position {position}: {_first_error(exc)}",
                    position=position,
                ) from exc

        explicit_ids = {record.id for record in records if record.id is not None}
        seen_ids: set[int] = set()
        next_id = 1
        cues: list[Cue] = []

        for position, record in enumerate(records):
            cue_id = record.id
            if cue_id is None:
                while next_id in explicit_ids or next_id in seen_ids:
                    next_id += 1
                cue_id = next_id
            elif cue_id in seen_ids:
                raise ValidationError(
                    f"Duplicate cue id {cue_id} at position {position}",
                    position=position,
                    cue_id=cue_id,
                )
            seen_ids.add(cue_id)

            try:
                cues.append(Cue(id=cue_id, start=record.start, end=record.end, text=record.text))
            except PydanticValidationError as exc:
                raise ValidationError(
                    f"Invalid cue at position {position}: {_first_error(exc)}",
                    position=position,
                    cue_id=cue_id,
                ) from exc

        store = cls(cues)
        logger.debug(f"Built cue store with {len(store)} cues")
        return store

    def iterate(self) -> Iterator[Cue]:
        """Return a fresh iterator over the cues in store order."""
        return iter(self._cues)

    def __iter__(self) -> Iterator[Cue]:
        return self.iterate()

    def __len__(self) -> int:
        return len(self._cues)

    def __getitem__(self, index: int) -> Cue:
        if not 0 <= index < len(self._cues):
            raise IndexError(f"Cue index {index} out of range (store has {len(self._cues)} cues)")
        return self._cues[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CueStore):
            return NotImplemented
        return self._cues == other._cues

    def __hash__(self) -> int:
        return hash(self._cues)

    def __repr__(self) -> str:
        return f"CueStore({len(self._cues)} cues)"

    @property
    def cues(self) -> tuple[Cue, ...]:
        return self._cues

    @property
    def duration(self) -> float:
        return max((cue.end for cue in self._cues), default=0.0)

    def to_raw(self) -> list[dict[str, Any]]:
        """Plain records suitable for editing and feeding back into ``build``."""
        return [cue.model_dump() for cue in self._cues]

    def replace(self, index: int, **changes: Any) -> "CueStore":
        """Return a new store with the cue at ``index`` updated."""
        records = self.to_raw()
        records[index] = {**self[index].model_dump(), **changes}
        return self.build(records)

    def insert(self, raw: CueInput) -> "CueStore":
        """Return a new store with ``raw`` added (sorted into place)."""
        return self.build([*self._cues, raw])

    def remove(self, index: int) -> "CueStore":
        """Return a new store without the cue at ``index``."""
        removed = self[index]
        return self.build(cue for cue in self._cues if cue.id != removed.id)
