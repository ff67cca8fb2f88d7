"""Caption synchronization and track generation service.

This service handles:
- Validated, immutable cue stores built from provider output
- WebVTT timestamp encoding and decoding
- WebVTT track rendering and parsing (plus SubRip export)
- Mapping a playback position to the active cue with enter/exit events
"""

__version__ = "1.0.0"
