"""
Main entry point for the prize wheel.

Runs the desktop simulator by default; `spin` and `prizes` work
headless against the same controller and prize store.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from prizewheel.config.settings import Settings, get_settings
from prizewheel.core.errors import WheelError
from prizewheel.core.events import EventBus
from prizewheel.core.state import WheelPhase
from prizewheel.storage.prize_store import JsonPrizeStore
from prizewheel.wheel.controller import SpinController

logger = logging.getLogger(__name__)

# Safety cap for headless spins (frames)
MAX_HEADLESS_FRAMES = 100_000


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def build_controller(settings: Settings, event_bus: Optional[EventBus] = None) -> SpinController:
    store = JsonPrizeStore(settings.storage.prizes_path, settings.storage.record_key)
    return SpinController.from_settings(settings, store, event_bus=event_bus)


async def run_simulator(settings: Settings) -> None:
    """Run the desktop simulator."""
    from prizewheel.audio.engine import WheelAudio
    from prizewheel.graphics.wheel_renderer import WheelRenderer
    from prizewheel.simulator.window import SimulatorWindow, WindowConfig

    event_bus = EventBus()
    controller = build_controller(settings, event_bus)
    controller.attach()

    renderer = WheelRenderer(size=settings.simulator.wheel_size)
    renderer.render(controller.prizes, controller.display_rotation)
    renderer.attach(event_bus)

    audio = None
    if settings.audio.enabled:
        audio = WheelAudio(
            assets_path=settings.audio.assets_path,
            volume=settings.audio.volume,
            spin_volume=settings.audio.spin_volume,
        )
        if audio.init():
            audio.attach(event_bus)
        else:
            audio = None

    window = SimulatorWindow(
        controller=controller,
        renderer=renderer,
        config=WindowConfig.from_settings(settings.simulator),
        audio=audio,
    )
    await window.run()


def run_headless_spin(settings: Settings) -> int:
    """Spin once at the reference frame rate and print the winner."""
    controller = build_controller(settings)
    frame_ms = settings.physics.frame_ms

    controller.spin()
    frames = 0
    while controller.phase == WheelPhase.SPINNING and frames < MAX_HEADLESS_FRAMES:
        controller.tick(frame_ms)
        frames += 1

    winner = controller.winner
    if winner is None:
        logger.error(f"Wheel did not stop within {frames} frames")
        return 1

    logger.debug(f"Resolved after {frames} frames ({frames * frame_ms / 1000:.1f}s)")
    print(f"{winner.index}\t{winner.label}\t{winner.rotation_degrees:.2f}")
    return 0


def run_prizes(settings: Settings, args: argparse.Namespace) -> int:
    """Prize list admin: list, add or remove."""
    controller = build_controller(settings)

    if args.action == "add":
        label = controller.add_prize(args.label)
        logger.info(f"Added prize {label!r}")
    elif args.action == "remove":
        label = controller.remove_prize(args.index)
        logger.info(f"Removed prize {label!r}")

    for index, label in enumerate(controller.prizes):
        print(f"{index}\t{label}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prizewheel", description="Spinning prize wheel")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("sim", help="Run the desktop simulator (default)")

    spin = sub.add_parser("spin", help="Spin once headless and print the winner")
    spin.add_argument("--policy", choices=["decay", "timed"], help="Spin model")
    spin.add_argument("--seed", type=int, help="Random seed for a reproducible spin")

    prizes = sub.add_parser("prizes", help="Manage the prize list")
    actions = prizes.add_subparsers(dest="action", required=True)
    actions.add_parser("list", help="Show prizes")
    add = actions.add_parser("add", help="Add a prize")
    add.add_argument("label")
    remove = actions.add_parser("remove", help="Remove a prize by index")
    remove.add_argument("index", type=int)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    args = build_parser().parse_args(argv)
    settings = get_settings()

    overrides = {}
    if getattr(args, "policy", None):
        overrides["policy"] = args.policy
    if getattr(args, "seed", None) is not None:
        overrides["seed"] = args.seed
    if args.debug:
        overrides["debug"] = True
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(settings.debug)
    command = args.command or "sim"
    logger.debug(f"Prize wheel starting: command={command}, policy={settings.policy}")

    try:
        if command == "sim":
            asyncio.run(run_simulator(settings))
            code = 0
        elif command == "spin":
            code = run_headless_spin(settings)
        else:
            code = run_prizes(settings, args)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        code = 0
    except WheelError as e:
        logger.error(str(e))
        code = 2
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        code = 1

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
