"""
Desktop window for the prize wheel using pygame.

Hosts the spin controller: turns mouse/touch and keys into bus events,
delivers frame ticks, and draws the wheel frame, labels and result
modal.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass

import pygame

from prizewheel.config.settings import SimulatorSettings
from prizewheel.core.events import (
    EventType,
    claim_event,
    pointer_event,
    spin_button_event,
    tick_event,
)
from prizewheel.core.state import WheelPhase
from prizewheel.audio.engine import WheelAudio
from prizewheel.graphics.wheel_renderer import TEXT_COLOR, WheelRenderer
from prizewheel.simulator.prize_editor import PrizeEditor
from prizewheel.wheel.controller import SpinController

logger = logging.getLogger(__name__)

LOG_COLORS = {
    logging.ERROR: (255, 100, 100),
    logging.WARNING: (255, 200, 100),
    logging.INFO: (150, 200, 150),
}


class LogTail(logging.Handler):
    """Keeps the last few formatted log lines for the in-window viewer."""

    def __init__(self, max_lines: int = 20):
        super().__init__()
        self.lines: deque[tuple[int, str]] = deque(maxlen=max_lines)
        self.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append((record.levelno, self.format(record)))


@dataclass
class WindowConfig:
    """Simulator window configuration."""
    width: int = 960
    height: int = 720
    title: str = "Prize Wheel"
    fullscreen: bool = False
    fps: int = 60
    wheel_size: int = 480

    # Colors
    bg_color: tuple[int, int, int] = (5, 8, 7)
    panel_color: tuple[int, int, int] = (26, 30, 28)
    text_color: tuple[int, int, int] = (200, 220, 210)
    accent_color: tuple[int, int, int] = (31, 122, 80)
    disabled_color: tuple[int, int, int] = (60, 60, 60)

    @classmethod
    def from_settings(cls, settings: SimulatorSettings) -> "WindowConfig":
        return cls(
            width=settings.width,
            height=settings.height,
            title=settings.title,
            fullscreen=settings.fullscreen,
            fps=settings.fps,
            wheel_size=settings.wheel_size,
        )


class SimulatorWindow:
    """
    Main window around one spin controller.

    Controls:
        Drag on wheel: Spin by hand (vertical swipe)
        SPACE / SPIN button: Spin
        ENTER / C / CLAIM button: Claim the result
        A: Prize admin panel (type + ENTER to add, click X to remove)
        M: Mute audio
        D: Toggle debug panel
        L: Toggle log viewer
        S: Screenshot
        ESC / Q: Exit
    """

    def __init__(
        self,
        controller: SpinController,
        renderer: WheelRenderer,
        config: WindowConfig | None = None,
        audio: WheelAudio | None = None,
    ) -> None:
        self.controller = controller
        self.renderer = renderer
        self.config = config or WindowConfig()
        self.audio = audio
        self.event_bus = controller.event_bus

        self._screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._running = False
        self._frame_count = 0
        self._show_debug = True
        self._dragging = False

        self._layout: dict[str, pygame.Rect] = {}
        self._delete_rects: list[pygame.Rect] = []
        self._font: pygame.font.Font | None = None
        self._small_font: pygame.font.Font | None = None
        self._big_font: pygame.font.Font | None = None

        # Prize admin
        self.editor = PrizeEditor(controller)
        self._admin_opened_frame = -1

        # Log viewer
        self._show_log = False
        self._log_tail = LogTail()
        logging.getLogger().addHandler(self._log_tail)
        self.event_bus.subscribe(EventType.PHASE_CHANGED, self._on_phase_changed)

        logger.info("SimulatorWindow created")

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)

        flags = pygame.DOUBLEBUF
        if self.config.fullscreen:
            flags |= pygame.FULLSCREEN

        self._screen = pygame.display.set_mode(
            (self.config.width, self.config.height),
            flags
        )
        self._clock = pygame.time.Clock()

        pygame.font.init()
        self._font = pygame.font.SysFont("DejaVu Sans", 18, bold=True)
        self._small_font = pygame.font.SysFont("DejaVu Sans", 13)
        self._big_font = pygame.font.SysFont("DejaVu Sans", 36, bold=True)

        self._calculate_layout()
        logger.info(f"Pygame initialized: {self.config.width}x{self.config.height}")

    def _calculate_layout(self) -> None:
        """Calculate positions for all UI elements."""
        w, h = self.config.width, self.config.height
        size = self.config.wheel_size

        wheel_x = (w - 280 - size) // 2
        wheel_y = (h - size - 70) // 2
        wheel = pygame.Rect(wheel_x, wheel_y, size, size)
        spin = pygame.Rect(0, 0, 160, 48)
        spin.midtop = (wheel.centerx, wheel.bottom + 16)

        modal = pygame.Rect(0, 0, 420, 220)
        modal.center = wheel.center
        claim = pygame.Rect(0, 0, 140, 44)
        claim.midbottom = (modal.centerx, modal.bottom - 20)

        self._layout = {
            "wheel": wheel,
            "spin": spin,
            "modal": modal,
            "claim": claim,
            "debug": pygame.Rect(w - 270, 50, 250, h - 100),
            "admin": pygame.Rect(10, 50, 320, h - 100),
        }

    # ===== INPUT =====

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                if self.editor.is_open:
                    self._handle_admin_key(event)
                else:
                    self._handle_keydown(event)
            elif event.type == pygame.TEXTINPUT and self.editor.is_open:
                # Skip the character of the key that opened the panel
                if self._admin_opened_frame != self._frame_count:
                    self.editor.type_text(event.text)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._handle_mouse_down(event.pos)
            elif event.type == pygame.MOUSEMOTION and self._dragging:
                self.event_bus.emit(pointer_event(
                    EventType.POINTER_MOVE, event.pos[1], pygame.time.get_ticks()
                ))
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                if self._dragging:
                    self._dragging = False
                    self.event_bus.emit(pointer_event(
                        EventType.POINTER_UP, event.pos[1], pygame.time.get_ticks()
                    ))

    def _handle_mouse_down(self, pos: tuple[int, int]) -> None:
        if self.editor.is_open and self._layout["admin"].collidepoint(pos):
            for index, rect in enumerate(self._delete_rects):
                if rect.collidepoint(pos):
                    self.editor.remove(index)
                    break
            return

        phase = self.controller.phase

        if phase == WheelPhase.RESOLVED:
            if self._layout["claim"].collidepoint(pos):
                self.event_bus.emit(claim_event(source="mouse"))
            return

        if self._layout["spin"].collidepoint(pos):
            self.event_bus.emit(spin_button_event(source="mouse"))
            return

        if self._on_wheel(pos):
            self.event_bus.emit(pointer_event(
                EventType.POINTER_DOWN, pos[1], pygame.time.get_ticks()
            ))
            self._dragging = self.controller.phase == WheelPhase.DRAGGING

    def _on_wheel(self, pos: tuple[int, int]) -> bool:
        rect = self._layout["wheel"]
        dx = pos[0] - rect.centerx
        dy = pos[1] - rect.centery
        return dx * dx + dy * dy <= self.renderer.radius ** 2

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key

        if key == pygame.K_ESCAPE or key == pygame.K_q:
            self._running = False
        elif key == pygame.K_d:
            self._show_debug = not self._show_debug
        elif key == pygame.K_l:
            self._show_log = not self._show_log
        elif key == pygame.K_a:
            self._toggle_admin()
        elif key == pygame.K_s:
            self._capture_screenshot()
        elif key == pygame.K_m and self.audio:
            self.audio.toggle_mute()
        elif key == pygame.K_SPACE:
            self.event_bus.emit(spin_button_event(source="keyboard"))
        elif key in (pygame.K_RETURN, pygame.K_c):
            self.event_bus.emit(claim_event(source="keyboard"))

    def _handle_admin_key(self, event: pygame.event.Event) -> None:
        """Keys while the admin panel has focus. Characters arrive as TEXTINPUT."""
        key = event.key

        if key == pygame.K_ESCAPE:
            self._toggle_admin()
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self.editor.submit()
        elif key == pygame.K_BACKSPACE:
            self.editor.backspace()

    def _toggle_admin(self) -> None:
        if self.editor.toggle():
            self._admin_opened_frame = self._frame_count
            self._show_log = False
            pygame.key.start_text_input()
        else:
            pygame.key.stop_text_input()

    def _on_phase_changed(self, event) -> None:
        if event.data.get("to") != WheelPhase.DRAGGING.name:
            self._dragging = False

    # ===== RENDERING =====

    def _render(self) -> None:
        """Render all UI elements."""
        if not self._screen:
            return

        self._screen.fill(self.config.bg_color)
        self._render_wheel()
        self._render_spin_button()
        if self.controller.phase == WheelPhase.RESOLVED:
            self._render_modal()
        if self._show_debug:
            self._render_debug_panel()
        if self._show_log:
            self._render_log_panel()
        if self.editor.is_open:
            self._render_admin_panel()
        self._render_title_bar()

        pygame.display.flip()

    def _render_wheel(self) -> None:
        rect = self._layout["wheel"]
        surface = pygame.surfarray.make_surface(self.renderer.frame.swapaxes(0, 1))
        self._screen.blit(surface, rect.topleft)

        if not self._font:
            return
        for anchor in self.renderer.anchors:
            angle = anchor.angle
            # Keep text upright on the left half
            if 90 < angle < 270:
                angle -= 180
            text = self._font.render(anchor.label, True, TEXT_COLOR)
            text = pygame.transform.rotate(text, -angle)
            text_rect = text.get_rect(center=(rect.x + anchor.x, rect.y + anchor.y))
            self._screen.blit(text, text_rect)

    def _render_spin_button(self) -> None:
        rect = self._layout["spin"]
        enabled = self.controller.phase == WheelPhase.IDLE
        color = self.config.accent_color if enabled else self.config.disabled_color
        pygame.draw.rect(self._screen, color, rect, border_radius=8)
        pygame.draw.rect(self._screen, (100, 120, 110), rect, 2, border_radius=8)
        if self._font:
            label = self._font.render("SPIN", True, (240, 240, 240))
            self._screen.blit(label, label.get_rect(center=rect.center))

    def _render_modal(self) -> None:
        winner = self.controller.winner
        if winner is None:
            return

        rect = self._layout["modal"]
        overlay = pygame.Surface((self.config.width, self.config.height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 160))
        self._screen.blit(overlay, (0, 0))

        pygame.draw.rect(self._screen, self.config.panel_color, rect, border_radius=10)
        pygame.draw.rect(self._screen, self.config.accent_color, rect, 3, border_radius=10)

        if self._small_font and self._big_font and self._font:
            title = self._small_font.render("YOU WON", True, self.config.text_color)
            self._screen.blit(title, title.get_rect(midtop=(rect.centerx, rect.y + 24)))
            prize = self._big_font.render(winner.label, True, (240, 240, 240))
            self._screen.blit(prize, prize.get_rect(center=(rect.centerx, rect.y + 90)))

            claim = self._layout["claim"]
            pygame.draw.rect(self._screen, self.config.accent_color, claim, border_radius=8)
            label = self._font.render("CLAIM", True, (240, 240, 240))
            self._screen.blit(label, label.get_rect(center=claim.center))

    def _render_debug_panel(self) -> None:
        """Render the debug information panel."""
        rect = self._layout["debug"]
        pygame.draw.rect(self._screen, self.config.panel_color, rect, border_radius=5)

        if not self._small_font:
            return

        controller = self.controller
        winner = controller.winner
        lines = [
            f"FPS: {self._clock.get_fps():.1f}" if self._clock else "FPS: --",
            f"Frame: {self._frame_count}",
            f"Phase: {controller.phase.name}",
            f"Policy: {controller.policy.name}",
            f"Rotation: {controller.rotation_degrees:.1f}",
            f"Display: {controller.display_rotation:.1f}",
            f"Velocity: {controller.angular_velocity:.2f}",
            f"Prizes: {len(controller.prizes)}",
            f"Winner: {winner.label if winner else '-'}",
            "",
            "---- CONTROLS ----",
            "DRAG    Spin by hand",
            "SPACE   Spin",
            "ENTER/C Claim",
            "M       Mute",
            "A       Prize admin",
            "",
            "---- SYSTEM ----",
            "D  Debug panel",
            "L  Log viewer",
            "S  Screenshot",
            "Q  Quit",
        ]

        y = rect.y + 10
        for line in lines:
            text_surface = self._small_font.render(line, True, self.config.text_color)
            self._screen.blit(text_surface, (rect.x + 10, y))
            y += 18

    def _render_log_panel(self) -> None:
        """Render the log viewer panel."""
        if not self._small_font or not self._font:
            return

        rect = pygame.Rect(10, 50, 320, self.config.height - 150)
        surf = pygame.Surface((rect.width, rect.height), pygame.SRCALPHA)
        surf.fill((20, 25, 22, 230))
        self._screen.blit(surf, rect.topleft)
        pygame.draw.rect(self._screen, (60, 90, 70), rect, 1, border_radius=5)

        title_surf = self._font.render("LOG", True, self.config.accent_color)
        self._screen.blit(title_surf, (rect.x + 10, rect.y + 5))

        y = rect.y + 30
        for level, line in self._log_tail.lines:
            color = LOG_COLORS.get(level, (150, 150, 170))
            display_line = line[:45] + "..." if len(line) > 48 else line
            text_surf = self._small_font.render(display_line, True, color)
            self._screen.blit(text_surf, (rect.x + 8, y))
            y += 14
            if y > rect.bottom - 10:
                break

    def _render_admin_panel(self) -> None:
        """Render the prize list with delete buttons and the input line."""
        self._delete_rects = []
        if not self._small_font or not self._font:
            return

        rect = self._layout["admin"]
        surf = pygame.Surface((rect.width, rect.height), pygame.SRCALPHA)
        surf.fill((20, 25, 22, 240))
        self._screen.blit(surf, rect.topleft)
        pygame.draw.rect(self._screen, self.config.accent_color, rect, 1, border_radius=5)

        title_surf = self._font.render("PRIZES", True, self.config.accent_color)
        self._screen.blit(title_surf, (rect.x + 10, rect.y + 5))

        y = rect.y + 34
        for index, label in enumerate(self.editor.prizes):
            text_surf = self._small_font.render(f"{index + 1:2d}. {label}", True, self.config.text_color)
            self._screen.blit(text_surf, (rect.x + 10, y))

            delete = pygame.Rect(rect.right - 34, y - 2, 22, 18)
            pygame.draw.rect(self._screen, (120, 50, 50), delete, border_radius=3)
            x_surf = self._small_font.render("X", True, (240, 240, 240))
            self._screen.blit(x_surf, x_surf.get_rect(center=delete.center))
            self._delete_rects.append(delete)
            y += 22

        # Input line
        y += 10
        field = pygame.Rect(rect.x + 10, y, rect.width - 20, 26)
        pygame.draw.rect(self._screen, (40, 46, 43), field, border_radius=4)
        cursor = "_" if (self._frame_count // 30) % 2 == 0 else " "
        input_surf = self._small_font.render(f"> {self.editor.text}{cursor}", True, (240, 240, 240))
        self._screen.blit(input_surf, (field.x + 6, field.y + 5))

        hint = "ENTER add | click X remove | ESC close"
        hint_surf = self._small_font.render(hint, True, (120, 140, 130))
        self._screen.blit(hint_surf, (rect.x + 10, field.bottom + 8))

        if self.editor.message:
            msg_surf = self._small_font.render(self.editor.message[:44], True, self.config.text_color)
            self._screen.blit(msg_surf, (rect.x + 10, field.bottom + 28))

    def _render_title_bar(self) -> None:
        if not self._font:
            return
        title = f"{self.config.title} | {self.controller.phase.name}"
        text_surface = self._font.render(title, True, self.config.accent_color)
        self._screen.blit(text_surface, (20, 15))

    def _capture_screenshot(self) -> None:
        """Capture and save a screenshot."""
        if self._screen:
            filename = f"screenshot_{self._frame_count}.png"
            pygame.image.save(self._screen, filename)
            logger.info(f"Screenshot saved: {filename}")

    # ===== LOOP =====

    async def run(self) -> None:
        """Main simulator loop."""
        self._init_pygame()
        self._running = True
        logger.info("Simulator started")

        while self._running:
            self._handle_events()

            # Frame tick with the host timestamp
            self.event_bus.emit(tick_event(pygame.time.get_ticks(), self._frame_count))

            await self.event_bus.process_queue()

            self._render()

            if self._clock:
                self._clock.tick(self.config.fps)
            self._frame_count += 1

            await asyncio.sleep(0)

        self._cleanup()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        logging.getLogger().removeHandler(self._log_tail)
        if self.audio:
            self.audio.cleanup()
        pygame.quit()
        logger.info("Simulator stopped")

    def stop(self) -> None:
        """Stop the simulator."""
        self._running = False
