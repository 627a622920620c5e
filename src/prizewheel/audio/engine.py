"""
Wheel audio - chiptune spin, tick and win cues.

Sounds are synthesized at startup. Optional `spin.*` / `win.*` files in
the assets directory replace the generated versions. Audio is a
nice-to-have: a missing mixer or a broken file disables that sound and
nothing is raised to the caller.
"""

import array
import logging
import math
import random
from pathlib import Path
from typing import Callable, Dict, Optional

import pygame

from prizewheel.core.events import Event, EventBus, EventType

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
ASSET_EXTENSIONS = (".wav", ".ogg", ".mp3")


def square(t: float, freq: float) -> float:
    """Square wave oscillator."""
    return 1 if (t * freq) % 1 < 0.5 else -1


def sine(t: float, freq: float) -> float:
    """Sine wave oscillator."""
    return math.sin(2 * math.pi * freq * t)


def saw(t: float, freq: float) -> float:
    """Sawtooth wave."""
    return 2 * ((t * freq) % 1) - 1


def noise() -> float:
    """White noise generator."""
    return random.random() * 2 - 1


class WheelAudio:
    """Audio collaborator for the spin controller.

    Listens for SPIN_STARTED, SPIN_TICK, WINNER_RESOLVED and
    WINNER_CLAIMED. All playback is fire and forget.
    """

    def __init__(
        self,
        assets_path: Optional[Path] = None,
        volume: float = 1.0,
        spin_volume: float = 0.5,
    ):
        self._assets_path = Path(assets_path) if assets_path else None
        self._initialized = False
        self._sounds: Dict[str, pygame.mixer.Sound] = {}
        self._volume = max(0.0, min(1.0, volume))
        self._spin_volume = max(0.0, min(1.0, spin_volume))
        self._muted = False
        self._spin_channel: Optional[pygame.mixer.Channel] = None
        self._win_channel: Optional[pygame.mixer.Channel] = None

    @property
    def is_enabled(self) -> bool:
        return self._initialized and not self._muted

    def init(self, skip_generation: bool = False) -> bool:
        """Initialize the mixer and prepare sounds. False if audio is unavailable."""
        try:
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 2, 1024)
            pygame.mixer.init()
            pygame.mixer.set_num_channels(8)
        except Exception as e:
            logger.warning(f"Audio disabled: {e}")
            self._initialized = False
            return False

        self._initialized = True
        logger.info("Wheel audio initialized")

        if not skip_generation:
            self._generate_all_sounds()
        self._load_assets()
        return True

    def _create_sound(self, samples: array.array) -> pygame.mixer.Sound:
        """Create a pygame Sound from mono samples (auto-converted to stereo)."""
        stereo = array.array('h')
        for s in samples:
            stereo.append(s)
            stereo.append(s)
        return pygame.mixer.Sound(buffer=stereo)

    def _generate_all_sounds(self) -> None:
        try:
            self._gen_spin()
            self._gen_wheel_tick()
            self._gen_win()
        except Exception as e:
            logger.warning(f"Sound generation failed: {e}")
            return
        logger.info(f"Generated {len(self._sounds)} sounds")

    def _gen_spin(self) -> None:
        """Looping whirr while the wheel spins."""
        samples = array.array('h')
        length = int(SAMPLE_RATE * 0.5)
        prev = 0.0
        for i in range(length):
            t = i / SAMPLE_RATE
            # Lowpassed noise with a slow wobble, seamless over the loop
            prev = prev + 0.08 * (noise() - prev)
            wobble = 0.7 + 0.3 * sine(t, 4)
            val = prev * 0.5 * wobble + saw(t, 55) * 0.08
            samples.append(int(val * 32767 * 0.6))
        self._sounds["spin"] = self._create_sound(samples)

    def _gen_wheel_tick(self) -> None:
        """Peg click as a slice passes the pointer."""
        samples = array.array('h')
        for i in range(int(SAMPLE_RATE * 0.02)):
            t = i / SAMPLE_RATE
            env = max(0, 1 - t * 60)
            val = noise() * 0.15 + square(t, 1800) * 0.1
            samples.append(int(val * env * 32767))
        self._sounds["wheel_tick"] = self._create_sound(samples)

    def _gen_win(self) -> None:
        """Winner fanfare."""
        samples = array.array('h')
        notes = [523, 659, 784, 1047, 784, 1047, 1319]
        for i in range(int(SAMPLE_RATE * 1.0)):
            t = i / SAMPLE_RATE
            note_idx = min(int(t * 12), len(notes) - 1)
            val = square(t, notes[note_idx]) * 0.18
            val += (sine(t, 261) + sine(t, 329) + sine(t, 392)) * 0.08
            samples.append(int(val * max(0, 1 - t) * 32767))
        self._sounds["win"] = self._create_sound(samples)

    def _find_asset(self, name: str) -> Optional[Path]:
        if self._assets_path is None:
            return None
        for ext in ASSET_EXTENSIONS:
            path = self._assets_path / f"{name}{ext}"
            if path.exists():
                return path
        return None

    def _load_assets(self) -> None:
        """Replace generated sounds with files from the assets directory."""
        for name in ("spin", "win"):
            path = self._find_asset(name)
            if path is None:
                continue
            try:
                self._sounds[name] = pygame.mixer.Sound(str(path))
                logger.info(f"Loaded sound asset: {path}")
            except Exception as e:
                logger.debug(f"Sound asset {path} unusable: {e}")

    # ===== PLAYBACK API =====

    def play(self, sound_name: str, volume: float = 1.0, loops: int = 0) -> Optional[pygame.mixer.Channel]:
        """Play a sound effect. Returns the channel, or None if nothing played."""
        if not self.is_enabled:
            return None

        sound = self._sounds.get(sound_name)
        if not sound:
            logger.debug(f"Sound not available: {sound_name}")
            return None

        try:
            sound.set_volume(volume * self._volume)
            return sound.play(loops=loops)
        except Exception as e:
            logger.debug(f"Playback of {sound_name} failed: {e}")
            return None

    def _stop_channel(self, channel: Optional[pygame.mixer.Channel]) -> None:
        if channel is None:
            return
        try:
            channel.stop()
        except Exception as e:
            logger.debug(f"Stopping channel failed: {e}")

    # ===== EVENT HANDLERS =====

    def on_spin_started(self, event: Event) -> None:
        self._stop_channel(self._spin_channel)
        self._spin_channel = self.play("spin", volume=self._spin_volume, loops=-1)

    def on_spin_tick(self, event: Event) -> None:
        self.play("wheel_tick", volume=0.5)

    def on_winner_resolved(self, event: Event) -> None:
        self._stop_channel(self._spin_channel)
        self._spin_channel = None
        self._win_channel = self.play("win")

    def on_winner_claimed(self, event: Event) -> None:
        self._stop_channel(self._win_channel)
        self._win_channel = None

    def attach(self, event_bus: EventBus) -> Callable[[], None]:
        """Subscribe to wheel events. Returns a detach function."""
        unsubscribers = [
            event_bus.subscribe(EventType.SPIN_STARTED, self.on_spin_started),
            event_bus.subscribe(EventType.SPIN_TICK, self.on_spin_tick),
            event_bus.subscribe(EventType.WINNER_RESOLVED, self.on_winner_resolved),
            event_bus.subscribe(EventType.WINNER_CLAIMED, self.on_winner_claimed),
        ]

        def detach() -> None:
            for unsubscribe in unsubscribers:
                unsubscribe()

        return detach

    # ===== VOLUME =====

    def set_volume(self, volume: float) -> None:
        """Set master volume (0.0 - 1.0)."""
        self._volume = max(0.0, min(1.0, volume))

    def get_volume(self) -> float:
        return self._volume

    def toggle_mute(self) -> bool:
        """Toggle mute state."""
        self._muted = not self._muted
        if self._initialized:
            if self._muted:
                pygame.mixer.pause()
            else:
                pygame.mixer.unpause()
        logger.info(f"Audio {'muted' if self._muted else 'unmuted'}")
        return self._muted

    def cleanup(self) -> None:
        """Cleanup audio resources."""
        if self._initialized:
            pygame.mixer.quit()
            self._initialized = False
            logger.info("Wheel audio cleaned up")
