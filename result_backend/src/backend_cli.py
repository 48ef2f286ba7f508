"""Operator CLI for inspecting task and group state in the result backend."""

import argparse
import json
import logging
import sys

from models.config import BackendSettings
from services.backend_factory import create_backend
from services.errors import StateStoreError
from services.log_service import configure_logging
from services.result_backend import ResultBackend

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Result Backend CLI")
    parser.add_argument(
        "--backend",
        help="Result backend URL (default: $RESULT_BACKEND)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: $LOG_LEVEL or info)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    state = commands.add_parser("state", help="Show the state of a task")
    state.add_argument("task_uuid")

    group = commands.add_parser("group", help="Show group completion")
    group.add_argument("group_uuid")
    group.add_argument("--expected", type=int, required=True)

    chord = commands.add_parser("trigger-chord", help="Flip a group's chord latch")
    chord.add_argument("group_uuid")

    purge_task = commands.add_parser("purge-task", help="Delete a task's state")
    purge_task.add_argument("task_uuid")

    purge_group = commands.add_parser("purge-group", help="Delete a group")
    purge_group.add_argument("group_uuid")

    return parser


def run_command(backend: ResultBackend, args: argparse.Namespace) -> dict:
    """Execute one CLI command and return its JSON-serializable output."""
    if args.command == "state":
        return backend.get_state(args.task_uuid).model_dump(mode="json")

    if args.command == "group":
        states = backend.group_task_states(args.group_uuid, args.expected)
        completed = sum(1 for state in states if state.is_completed())
        return {
            "group_uuid": args.group_uuid,
            "expected": args.expected,
            "completed": completed,
            "is_complete": completed == args.expected,
            "tasks": [state.model_dump(mode="json") for state in states],
        }

    if args.command == "trigger-chord":
        return {
            "group_uuid": args.group_uuid,
            "triggered": backend.trigger_chord(args.group_uuid),
        }

    if args.command == "purge-task":
        backend.purge_state(args.task_uuid)
        return {"task_uuid": args.task_uuid, "purged": True}

    if args.command == "purge-group":
        backend.purge_group(args.group_uuid)
        return {"group_uuid": args.group_uuid, "purged": True}

    raise ValueError(f"Unknown command: {args.command}")


def load_settings(args: argparse.Namespace) -> BackendSettings:
    """Read settings from the environment and apply command-line overrides."""
    settings = BackendSettings.from_env()
    overrides = {}
    if args.backend:
        overrides["result_backend"] = args.backend
    if args.log_level:
        overrides["log_level"] = args.log_level
    if overrides:
        settings = BackendSettings.model_validate(
            {**settings.model_dump(), **overrides}
        )
    return settings


def main(argv: list[str] | None = None) -> int:
    """Run one command against the configured backend."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(level=settings.log_level, log_dir=settings.log_dir)

    try:
        backend = create_backend(settings)
        output = run_command(backend, args)
    except (StateStoreError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
