"""Sound cues."""
