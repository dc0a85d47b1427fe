"""Cue sounds: numpy synthesis + QSoundEffect playback.

Every sound is built from sine tones shaped by an ADSR envelope and
written as a 16-bit mono WAV into the sounds cache on first use, so no
audio assets ship with the package.

``SoundManager`` is the playback side of the engine's ``cue`` signal:
``attach(engine)`` connects it, and each cue plays whatever sound is
selected for it (or nothing).  Playback is fire-and-forget.
"""

from __future__ import annotations

import io
import wave
from pathlib import Path
from typing import Callable

import numpy as np
import structlog

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_DATA_DIR
from ..timer.schedule import Cue
from .catalog import DEFAULT_CUE_SOUNDS, SOUND_NAMES, normalize_sound_name

log = structlog.get_logger()

SOUNDS_DIR = APP_DATA_DIR / "sounds"

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _ms(milliseconds: float) -> int:
    return int(SAMPLE_RATE * milliseconds / 1000)


def _adsr(
    samples: np.ndarray,
    attack_ms: float,
    decay_ms: float,
    sustain: float,
    release_ms: float,
) -> np.ndarray:
    """Apply an attack/decay/sustain/release envelope to *samples*.

    Segments that don't fit are clipped; the release always ends at 0.
    """
    n = len(samples)
    gain = np.full(n, sustain)
    a = min(_ms(attack_ms), n)
    d = min(a + _ms(decay_ms), n)
    r = max(n - _ms(release_ms), d)
    gain[:a] = np.linspace(0.0, 1.0, a, endpoint=False)
    gain[a:d] = np.linspace(1.0, sustain, d - a, endpoint=False)
    gain[r:] = np.linspace(gain[r - 1] if r else 1.0, 0.0, n - r)
    return samples * gain


def _tone(freq: float, ms: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(_ms(ms)) / SAMPLE_RATE
    return amplitude * np.sin(2 * np.pi * freq * t)


def _gap(ms: float) -> np.ndarray:
    return np.zeros(_ms(ms))


def _wav_bytes(*chunks: np.ndarray) -> bytes:
    """Concatenate float chunks in [-1, 1] into a 16-bit PCM mono WAV."""
    pcm = (np.clip(np.concatenate(chunks), -1.0, 1.0) * 32767).astype("<i2")
    out = io.BytesIO()
    with wave.open(out, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(SAMPLE_RATE)
        wav.writeframes(pcm.tobytes())
    return out.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_beep() -> bytes:
    """Single 880 Hz beep, 150 ms."""
    return _wav_bytes(_adsr(_tone(880.0, 150), 2, 7, 0.6, 14), _gap(50))


def _generate_chime() -> bytes:
    """Three ascending notes (D5 → F#5 → A5) to get moving."""
    chunks = []
    for freq in (587.33, 739.99, 880.00):
        chunks += [_adsr(_tone(freq, 110), 2, 5, 0.4, 7), _gap(25)]
    return _wav_bytes(*chunks, _gap(50))


def _generate_bell() -> bytes:
    """Soft bell (E5 with an octave overtone) and a long tail for rest."""
    ring = _tone(659.25, 900, 0.35) + _tone(1318.5, 900, 0.07)
    return _wav_bytes(_adsr(ring, 10, 250, 0.3, 500))


def _generate_double_beep() -> bytes:
    """Two short 1 kHz beeps, 90 ms apart."""
    beep = _adsr(_tone(1000.0, 50, 0.4), 1, 2, 0.3, 5)
    return _wav_bytes(beep, _gap(90), beep, _gap(50))


def _generate_whistle() -> bytes:
    """Rising sweep 600 Hz → 1400 Hz over 300 ms."""
    freqs = np.linspace(600.0, 1400.0, _ms(300))
    sweep = 0.4 * np.sin(2 * np.pi * np.cumsum(freqs) / SAMPLE_RATE)
    return _wav_bytes(_adsr(sweep, 7, 23, 0.7, 45))


def _generate_fanfare() -> bytes:
    """Workout complete: C5 → E5 → G5 → C6, last note held."""
    *lead, top = (523.25, 659.25, 783.99, 1046.50)
    chunks = []
    for freq in lead:
        chunks += [_adsr(_tone(freq, 120), 2, 5, 0.4, 6), _gap(30)]
    held = _tone(top, 450, 0.5) + _tone(top * 2, 450, 0.08)
    chunks.append(_adsr(held, 2, 9, 0.5, 20))
    return _wav_bytes(*chunks)


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "beep": _generate_beep,
    "chime": _generate_chime,
    "bell": _generate_bell,
    "double_beep": _generate_double_beep,
    "whistle": _generate_whistle,
    "fanfare": _generate_fanfare,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Plays the sound selected for each engine cue.

    WAV files are synthesised into *sounds_dir* when missing and loaded
    once into ``QSoundEffect`` objects.

    Usage::

        sounds = SoundManager(parent=engine)
        sounds.set_cue_sound(Cue.START_REST, "whistle")
        sounds.attach(engine)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 70
        self._cue_sounds: dict[Cue, str | None] = dict(DEFAULT_CUE_SOUNDS)
        self._effects: dict[str, QSoundEffect] = {}

        cache = sounds_dir or SOUNDS_DIR
        cache.mkdir(parents=True, exist_ok=True)
        for name in SOUND_NAMES:
            self._effects[name] = self._load(name, cache / f"{name}.wav")

    # ── public API ────────────────────────────────────────────────────

    @property
    def volume(self) -> int:
        """Playback volume, 0-100."""
        return self._volume

    def set_volume(self, level: int) -> None:
        self._volume = max(0, min(int(level), 100))
        for effect in self._effects.values():
            effect.setVolume(self._volume / 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    def cue_sound(self, cue: Cue) -> str | None:
        return self._cue_sounds.get(cue)

    def set_cue_sound(self, cue: Cue, name: str | None) -> None:
        """Choose the sound for *cue*; unknown names silence it."""
        self._cue_sounds[cue] = normalize_sound_name(name)

    def set_cue_sounds(self, sounds: dict[Cue, str | None]) -> None:
        for cue, name in sounds.items():
            self.set_cue_sound(cue, name)

    def play(self, name: str | None) -> None:
        """Fire *name* without waiting.  Silent when disabled or unknown."""
        if self._enabled and name in self._effects:
            self._effects[name].play()

    def on_cue(self, cue: Cue) -> None:
        self.play(self._cue_sounds.get(cue))

    def attach(self, engine) -> None:
        """Play cue sounds for *engine* (a ``TimerEngine``)."""
        engine.cue.connect(self.on_cue)

    # ── internal ──────────────────────────────────────────────────────

    def _load(self, name: str, path: Path) -> QSoundEffect:
        if not path.exists():
            path.write_bytes(_GENERATORS[name]())
            log.debug("sound_generated", name=name, path=str(path))
        effect = QSoundEffect(self)
        effect.setSource(QUrl.fromLocalFile(str(path)))
        effect.setVolume(self._volume / 100)
        return effect
