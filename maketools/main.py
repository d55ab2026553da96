"""
Command line entry point for the make tools.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from maketools.app import activate, deactivate
from maketools.ui.main_window import run_gui
from maketools.ui.quick_pick import ConsolePrompt


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="maketools", description="Inspect and select make configurations")
    parser.add_argument("--project", default=".", help="Project root (default: current directory)")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("show", help="Print the effective build settings")
    commands.add_parser("gui", help="Open the selection window")
    commands.add_parser("configurations", help="List the configuration names")
    select = commands.add_parser("select-configuration", help="Pick the active configuration")
    select.add_argument("name", nargs="?", help="Configuration name; prompts when omitted")
    target = commands.add_parser("set-target", help="Set the active target (empty for none)")
    target.add_argument("name")
    launch = commands.add_parser("set-launch", help="Set the active launch configuration")
    launch.add_argument("text", help="Encoded launch configuration: cwd>binary(args)")
    return parser


def _print_error(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "gui":
        return run_gui(Path(args.project))
    tools = activate(Path(args.project), None, ConsolePrompt(), on_error=_print_error, watch=False)
    try:
        state = tools.context.state
        if args.command == "show":
            effective = state.effective
            print(f"configuration: {state.configuration_name}")
            print(f"target: {state.target.label}")
            print(f"command: {effective.command_line()}")
            print(f"build log: {effective.build_log or '-'}")
            print(f"launch: {state.launch_label()}")
        elif args.command == "configurations":
            for name in tools.manager.prepare_configuration_items():
                marker = "*" if name == state.configuration_name else " "
                print(f"{marker} {name}")
        elif args.command == "select-configuration":
            if args.name:
                tools.manager.set_configuration_by_name(args.name)
            elif tools.manager.set_new_configuration() is None:
                return 1
            print(state.effective.command_line())
        elif args.command == "set-target":
            tools.manager.set_target_by_name(args.name)
        elif args.command == "set-launch":
            tools.manager.set_launch_configuration_by_name(args.text)
            if state.launch_configuration is None:
                return 1
        return 0
    finally:
        deactivate(tools)


if __name__ == "__main__":
    raise SystemExit(main())
