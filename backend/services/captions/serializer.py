"""WebVTT track rendering and parsing."""

from __future__ import annotations

import re
from typing import Any

from shared.config import config
from shared.models import CUE_TIME_SEPARATOR, RawCue, TrackFormat
from shared.utils import setup_logging

from .errors import FormatError, ValidationError
from .store import CueStore
from .timecode import decode, encode

logger = setup_logging("caption-serializer")

HEADER = "WEBVTT"
BOM = "\ufeff"

# Cue settings after the end timestamp are allowed and ignored.
_TIMING_PATTERN = re.compile(r"(?P<start>\S+)[ \t]+-->[ \t]+(?P<end>\S+)(?:[ \t]+.*)?")
_NUMERIC_ID_PATTERN = re.compile(r"[0-9]+")

TRACK_FORMATS: dict[TrackFormat, dict[str, Any]] = {
    TrackFormat.VTT: {
        "name": "WebVTT",
        "extension": "vtt",
        "mime_type": "text/vtt",
        "description": "Web Video Text Tracks format",
        "importable": True,
    },
    TrackFormat.SRT: {
        "name": "SRT",
        "extension": "srt",
        "mime_type": "application/x-subrip",
        "description": "SubRip subtitle format with timing",
        "importable": False,
    },
}


def _is_header(line: str) -> bool:
    return line == HEADER or line.startswith((f"{HEADER} ", f"{HEADER}\t"))


def _is_note(line: str) -> bool:
    return line == "NOTE" or line.startswith(("NOTE ", "NOTE\t"))


def _split_blocks(lines: list[str]) -> list[list[str]]:
    blocks: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line)
        elif current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)
    return blocks


def _resolve_id_mode(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    lowered = str(value).lower()
    if lowered in {"always", "true"}:
        return True
    if lowered in {"never", "false"}:
        return False
    return None


class TrackSerializer:
    """Render cue stores to WebVTT text and parse WebVTT text back.

    Pure text transformation: no filesystem or network access. Rendering is
    byte-for-byte reproducible for a given store.
    """

    def __init__(self, include_ids: bool | None = None):
        """
        Args:
            include_ids: ``True`` always writes cue identifier lines, ``False``
                never does, ``None`` writes them only when the store's ids
                differ from their 1-based positions.
        """
        if include_ids is None:
            include_ids = _resolve_id_mode(
                config.get_pipeline_value("captions.render.include_ids", "auto")
            )
        self.include_ids = include_ids

    def render(self, store: CueStore, include_ids: bool | None = None) -> str:
        """Render a store as a WebVTT document."""
        mode = self.include_ids if include_ids is None else include_ids
        if mode is None:
            mode = any(cue.id != position for position, cue in enumerate(store.iterate(), start=1))

        lines = [HEADER, ""]
        for cue in store.iterate():
            if mode:
                lines.append(str(cue.id))
            lines.append(f"{encode(cue.start)} {CUE_TIME_SEPARATOR} {encode(cue.end)}")
            lines.append(cue.text)
            lines.append("")

        logger.debug(f"Rendered WebVTT track with {len(store)} cues")
        return "\n".join(lines) + "\n"

    def render_srt(self, store: CueStore) -> str:
        """Render a store as SubRip, numbering cues 1..n in store order."""
        lines: list[str] = []
        for position, cue in enumerate(store.iterate(), start=1):
            lines.append(f"{position}")
            lines.append(
                f"{encode(cue.start, separator=',')} {CUE_TIME_SEPARATOR} {encode(cue.end, separator=',')}"
            )
            lines.append(cue.text)
            lines.append("")  # Empty line between subtitles

        return "\n".join(lines)

    def render_as(self, store: CueStore, track_format: TrackFormat | str) -> str:
        """Render a store in the requested export format."""
        try:
            target = TrackFormat(track_format)
        except ValueError as exc:
            raise FormatError(f"Unsupported track format: {track_format}") from exc

        if target is TrackFormat.SRT:
            return self.render_srt(store)
        return self.render(store)

    def parse(self, text: str) -> CueStore:
        """Parse a WebVTT document into a validated store.

        Raises:
            FormatError: missing header, a block without a well-formed timing
                line, an undecodable timestamp, ``start >= end`` or a block
                that fails store validation. Cue block errors carry the
                1-based block index.
        """
        if not isinstance(text, str):
            raise FormatError(f"Track body must be text, got {type(text).__name__}")

        lines = [line.rstrip() for line in text.splitlines()]
        if lines and lines[0].startswith(BOM):
            lines[0] = lines[0][len(BOM):]
        if not lines or not _is_header(lines[0]):
            raise FormatError(f"Missing {HEADER} header line")

        # Header metadata runs up to the first blank line.
        body_start = 1
        while body_start < len(lines) and lines[body_start].strip():
            if CUE_TIME_SEPARATOR in lines[body_start]:
                raise FormatError(
                    f"Block 1: timing line found inside the {HEADER} header, a blank line must follow the header",
                    block=1,
                )
            body_start += 1

        records: list[RawCue] = []
        record_blocks: list[int] = []
        for number, block in enumerate(_split_blocks(lines[body_start:]), start=1):
            if _is_note(block[0]):
                continue
            records.append(self._parse_block(block, number))
            record_blocks.append(number)

        try:
            store = CueStore.build(records)
        except ValidationError as exc:
            block = record_blocks[exc.position] if exc.position is not None else None
            raise FormatError(f"Block {block}: {exc}", block=block) from exc

        logger.info(f"Parsed WebVTT track with {len(store)} cues")
        return store

    def _parse_block(self, block: list[str], number: int) -> RawCue:
        identifier: str | None = None
        timing_at = 0
        if CUE_TIME_SEPARATOR not in block[0]:
            if len(block) > 1 and CUE_TIME_SEPARATOR in block[1]:
                identifier = block[0].strip()
                timing_at = 1
            else:
                raise FormatError(f"Block {number}: missing timing line", block=number)

        timing_line = block[timing_at].strip()
        match = _TIMING_PATTERN.fullmatch(timing_line)
        if match is None:
            raise FormatError(f"Block {number}: malformed timing line {timing_line!r}", block=number)

        try:
            start = decode(match.group("start"))
            end = decode(match.group("end"))
        except FormatError as exc:
            raise FormatError(f"Block {number}: {exc}", block=number) from exc

        if start >= end:
            raise FormatError(
                f"Block {number}: cue start {start:.3f}s is not before end {end:.3f}s",
                block=number,
            )

        text_lines = block[timing_at + 1:]
        if not text_lines:
            raise FormatError(f"Block {number}: cue has no text", block=number)
        if any(CUE_TIME_SEPARATOR in line for line in text_lines):
            raise FormatError(f"Block {number}: unexpected timing line inside cue text", block=number)

        cue_id = None
        if identifier and _NUMERIC_ID_PATTERN.fullmatch(identifier):
            cue_id = int(identifier)

        return RawCue(start=start, end=end, text="\n".join(text_lines), id=cue_id)
