"""Entry point for python -m pttimer."""

from __future__ import annotations

import argparse
import dataclasses
import json
import signal
import sys
from pathlib import Path

from PyQt6.QtCore import QCoreApplication, QTimer

from .log import configure_logging
from .settings import load_settings, save_settings
from .setups import (
    SetupImportError,
    add_or_update_setup,
    clear_setups,
    delete_setup,
    export_setups_json,
    find_setup,
    import_setups_json,
    init_db,
    list_setups,
    move_setup_down,
    move_setup_up,
)
from .timer import Status, TimerConfig, TimerEngine, TimerSnapshot

# CLI flag → TimerConfig field
_OVERRIDES = {
    "move_to": "move_to_seconds",
    "exercise": "exercise_seconds",
    "move_from": "move_from_seconds",
    "rest": "rest_seconds",
    "set_rest": "set_rest_seconds",
    "reps": "reps",
    "sets": "sets",
    "total_time": "total_time_seconds",
}

# Let the complete cue ring out before the event loop exits.
_QUIT_DELAY_MS = 1500

# Python signal handlers only run when the interpreter gets control, and
# nothing else wakes it while a run is paused.
_SIGNAL_POLL_MS = 200


def _add_config_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("timer overrides (seconds / counts)")
    group.add_argument("--move-to", type=int, metavar="SEC", help="Time to move into position")
    group.add_argument("--exercise", type=int, metavar="SEC", help="Exercise time per rep")
    group.add_argument("--move-from", type=int, metavar="SEC", help="Time to move out of position")
    group.add_argument("--rest", type=int, metavar="SEC", help="Rest between reps")
    group.add_argument("--set-rest", type=int, metavar="SEC", help="Rest between sets")
    group.add_argument("--reps", type=int, metavar="N", help="Reps per set (0 = total-time mode)")
    group.add_argument("--sets", type=int, metavar="N", help="Number of sets")
    group.add_argument("--total-time", type=int, metavar="SEC", help="Total time budget when reps is 0")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="pttimer",
        description="Interval workout timer (reps or total-time mode)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pttimer run                             # last-used configuration
  pttimer run --exercise 30 --rest 10 --reps 8 --sets 3
  pttimer run --reps 0 --total-time 600 --sets 2
  pttimer run --setup "Wall sits"          # Ctrl+Z pauses/resumes
  pttimer setups save "Wall sits" --exercise 45 --reps 5
  pttimer setups export setups.json
""",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        metavar="LEVEL",
        help="Logging level (default: from settings, INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a workout")
    run.add_argument("--setup", metavar="NAME", help="Start from a saved setup")
    run.add_argument("--no-sound", action="store_true", help="Disable cue sounds")
    _add_config_options(run)

    setups = sub.add_parser("setups", help="Manage named setups")
    actions = setups.add_subparsers(dest="action", required=True)
    actions.add_parser("list", help="List saved setups in order")
    for action, help_text in (
        ("show", "Print one setup as JSON"),
        ("delete", "Delete a setup"),
        ("up", "Move a setup one place up"),
        ("down", "Move a setup one place down"),
    ):
        actions.add_parser(action, help=help_text).add_argument("name")
    save = actions.add_parser("save", help="Save the current configuration under a name")
    save.add_argument("name")
    _add_config_options(save)
    actions.add_parser("clear", help="Delete every setup")
    imp = actions.add_parser("import", help="Replace all setups from a JSON file")
    imp.add_argument("path", type=Path)
    exp = actions.add_parser("export", help="Write all setups as JSON (stdout if no path)")
    exp.add_argument("path", type=Path, nargs="?")

    return parser.parse_args(argv)


def _with_overrides(config: TimerConfig, args: argparse.Namespace) -> TimerConfig:
    changes = {
        field: getattr(args, flag)
        for flag, field in _OVERRIDES.items()
        if getattr(args, flag, None) is not None
    }
    return dataclasses.replace(config, **changes) if changes else config


def format_snapshot(snapshot: TimerSnapshot) -> str:
    """One console line for a snapshot."""
    if snapshot.status is Status.FINISHED:
        return "Finished!"
    text = (
        f"Set {snapshot.current_set}  Rep {snapshot.current_rep}  "
        f"{snapshot.status.value:<8} {snapshot.remaining_seconds:>4}s"
    )
    if snapshot.progress_display:
        text += f"  {snapshot.progress_display}"
    if snapshot.is_paused:
        text += "  (paused)"
    return text


def toggle_pause(engine: TimerEngine) -> None:
    """Pause a running workout or resume a paused one."""
    if engine.is_paused:
        engine.resume()
    else:
        engine.pause()


def _print_snapshot(snapshot: TimerSnapshot) -> None:
    end = "\n" if snapshot.status is Status.FINISHED else ""
    print(f"\r\033[K{format_snapshot(snapshot)}", end=end, flush=True)


# ══════════════════════════════════════════════════════════════════════
#  COMMANDS
# ══════════════════════════════════════════════════════════════════════


def _cmd_run(args: argparse.Namespace) -> int:
    settings = load_settings()
    if args.setup:
        setup = find_setup(args.setup)
        if setup is None:
            print(f"No setup named {args.setup!r}", file=sys.stderr)
            return 1
        settings.apply_setup(setup)

    config = _with_overrides(settings.to_config(), args)
    if config.mode is None:
        print("Nothing to run: set --reps or --total-time above 0.", file=sys.stderr)
        return 1
    settings.apply_config(config)
    save_settings(settings)

    app = QCoreApplication(sys.argv[:1])
    engine = TimerEngine()
    engine.snapshot_changed.connect(_print_snapshot)

    if settings.sound_enabled and not args.no_sound:
        from .audio.sounds import SoundManager

        sounds = SoundManager(parent=engine)
        sounds.set_volume(settings.sound_volume)
        sounds.set_cue_sounds(settings.cue_sounds())
        sounds.attach(engine)

    interrupted = False

    def on_snapshot(snapshot: TimerSnapshot) -> None:
        if snapshot.status is Status.FINISHED:
            QTimer.singleShot(_QUIT_DELAY_MS, app.quit)

    def on_interrupt(*_args) -> None:
        nonlocal interrupted
        interrupted = True
        engine.stop()
        print()
        app.quit()

    engine.snapshot_changed.connect(on_snapshot)
    signal.signal(signal.SIGINT, on_interrupt)
    # Ctrl+Z pauses and resumes instead of suspending the process.
    if hasattr(signal, "SIGTSTP"):
        signal.signal(signal.SIGTSTP, lambda *_args: toggle_pause(engine))
        print("Ctrl+Z pauses/resumes, Ctrl+C stops.", file=sys.stderr)

    poll = QTimer()
    poll.timeout.connect(lambda: None)
    poll.start(_SIGNAL_POLL_MS)

    engine.start(config)
    app.exec()
    return 130 if interrupted else 0


def _cmd_setups(args: argparse.Namespace) -> int:
    action = args.action

    if action == "list":
        for setup in list_setups():
            config = setup.to_config()
            if config.reps:
                summary = f"{config.reps} reps x {config.sets} sets"
            else:
                summary = f"{config.total_time_seconds}s x {config.sets} sets"
            print(f"{setup.position + 1:>3}. {setup.name}  ({summary})")
        return 0

    if action == "save":
        settings = load_settings()
        config = _with_overrides(settings.to_config(), args)
        saved = add_or_update_setup(args.name, config, settings.cue_sounds())
        if saved is None:
            print("Setup name must not be blank", file=sys.stderr)
            return 1
        settings.apply_setup(saved)
        save_settings(settings)
        return 0

    if action == "import":
        try:
            imported = import_setups_json(args.path.read_text(encoding="utf-8"))
        except (OSError, SetupImportError) as exc:
            print(f"Import failed: {exc}", file=sys.stderr)
            return 1
        if imported:
            settings = load_settings()
            settings.apply_setup(imported[0])
            save_settings(settings)
        print(f"Imported {len(imported)} setup(s)")
        return 0

    if action == "export":
        payload = export_setups_json()
        if args.path is None:
            sys.stdout.write(payload)
        else:
            args.path.write_text(payload, encoding="utf-8")
        return 0

    if action == "clear":
        clear_setups()
        settings = load_settings()
        settings.active_setup_name = None
        save_settings(settings)
        return 0

    if action == "show":
        setup = find_setup(args.name)
        if setup is None:
            print(f"No setup named {args.name!r}", file=sys.stderr)
            return 1
        print(json.dumps({
            "name": setup.name,
            "config": setup.to_config().to_dict(),
            "sounds": {cue.value: name for cue, name in setup.cue_sounds().items()},
        }, indent=2))
        return 0

    handlers = {"delete": delete_setup, "up": move_setup_up, "down": move_setup_down}
    if not handlers[action](args.name):
        print(f"Nothing to do for {args.name!r}", file=sys.stderr)
        return 1
    if action == "delete":
        settings = load_settings()
        if (settings.active_setup_name or "").lower() == args.name.strip().lower():
            settings.active_setup_name = None
            save_settings(settings)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(level=args.log_level or load_settings().log_level)
    init_db()

    if args.command == "run":
        return _cmd_run(args)
    return _cmd_setups(args)


if __name__ == "__main__":
    sys.exit(main())
