from __future__ import annotations

import time
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

from maketools.app import activate, deactivate
from maketools.build.process import ProcessResult
from maketools.core.threads import BackgroundWorkers
from maketools.workspace.selection import NO_TARGET, NamedTarget
from tests.fakes import FakeParser, FakePrompt, FakeRunner, RecordingStatus


@pytest.fixture
def make_tools(project: Path, write_configurations, immediate_executor):
    write_configurations([{"name": "Debug"}, {"name": "Release", "commandArgs": ["-j8"]}])
    runner = FakeRunner(ProcessResult(stdout_chunks=["clean:\n", "all:\n", "run /proj /proj/out/app --fast\n"]))
    prompt = FakePrompt()
    status = RecordingStatus()
    errors: list[str] = []
    tools = activate(
        project,
        FakeParser(),
        prompt,
        status=status,
        on_error=errors.append,
        runner=runner,
        workers=BackgroundWorkers(),
        watch=False,
    )
    reparses: list[bool] = []
    tools.context.events.reparse_requested.connect(lambda: reparses.append(True))
    yield tools, prompt, status, runner, reparses, errors
    deactivate(tools)


def test_configuration_items_come_from_file(make_tools) -> None:
    tools, *_ = make_tools
    assert tools.manager.prepare_configuration_items() == ["Debug", "Release"]


def test_configuration_items_default_without_file(make_tools) -> None:
    tools, *_ = make_tools
    tools.context.configurations.path.unlink()
    assert tools.manager.prepare_configuration_items() == ["Default"]


def test_set_new_configuration_persists_choice(make_tools) -> None:
    tools, prompt, status, _, reparses, _ = make_tools
    prompt.answer = "Release"

    assert tools.manager.set_new_configuration() == "Release"

    assert prompt.calls == [(["Debug", "Release"], None)]
    assert tools.context.settings.get("buildConfiguration") == "Release"
    assert tools.context.state.effective.command_args == ("-j8",)
    assert status.configuration == "Release"
    assert reparses == [True]


def test_cancelled_prompt_changes_nothing(make_tools) -> None:
    tools, prompt, _, _, reparses, _ = make_tools
    cancelled: list[str] = []
    tools.manager.selection_cancelled.connect(cancelled.append)

    assert tools.manager.set_new_configuration() is None

    assert tools.context.settings.get("buildConfiguration") is None
    assert cancelled == ["configuration"]
    assert reparses == []


def test_set_new_target_runs_dry_run_and_applies_choice(make_tools, project: Path) -> None:
    tools, prompt, status, runner, reparses, _ = make_tools
    prompt.answer = "clean"
    labels: list[str] = []
    tools.context.selection.target_changed.connect(labels.append)

    tools.manager.set_new_target()

    assert runner.calls == [("make", ["all", "--dry-run", "-p"], project)]
    assert prompt.calls == [(["all", "clean"], None)]
    assert tools.context.state.target == NamedTarget("clean")
    assert tools.context.settings.get("buildTarget") == "clean"
    assert status.target == "clean"
    assert labels == ["clean"]
    assert reparses == [True]


def test_empty_target_name_clears_the_target(make_tools) -> None:
    tools, _, status, _, _, _ = make_tools
    tools.manager.set_target_by_name("install")
    tools.manager.set_target_by_name("")

    assert tools.context.state.target == NO_TARGET
    assert tools.context.settings.get("buildTarget") is None
    assert status.target == "Default"


def test_set_new_launch_configuration(make_tools, project: Path) -> None:
    tools, prompt, status, runner, reparses, _ = make_tools
    tools.manager.set_target_by_name("all")
    reparses.clear()
    prompt.answer = "/proj>out/app(--fast)"

    tools.manager.set_new_launch_configuration()

    assert runner.calls[-1][1] == ["all", "--dry-run", "--always-make", "--keep-going", "--print-data-base"]
    assert prompt.calls[-1] == (["/proj>out/app(--fast)"], None)
    record = tools.context.state.launch_configuration
    assert record.binary == "/proj/out/app"
    assert record.args == ("--fast",)
    assert tools.context.settings.get("launchConfiguration") == "/proj>out/app(--fast)"
    assert status.launch == "/proj>out/app(--fast)"
    assert reparses == []


def test_no_launch_candidates_shows_placeholder(make_tools) -> None:
    tools, prompt, _, _, _, _ = make_tools
    tools.manager.select_launch_configuration([])
    assert prompt.calls == [([], "No launch targets identified")]


def test_malformed_launch_text_clears_the_setting(make_tools) -> None:
    tools, _, status, _, _, _ = make_tools
    tools.manager.set_launch_configuration_by_name("/proj>out/app()")
    tools.manager.set_launch_configuration_by_name("garbage")

    assert tools.context.state.launch_configuration is None
    assert tools.context.settings.get("launchConfiguration") is None
    assert status.launch == "No launch configuration set"


def test_malformed_configurations_file_reports_error(make_tools, write_configurations) -> None:
    tools, _, _, _, _, errors = make_tools
    write_configurations("{oops")

    assert tools.manager.prepare_configuration_items() == ["Debug", "Release"]
    assert len(errors) == 1


def test_dry_run_on_worker_thread_reaches_prompt(qt_app, project: Path, write_configurations) -> None:
    write_configurations([{"name": "Debug"}])
    prompt = FakePrompt("clean")
    tools = activate(
        project,
        FakeParser(),
        prompt,
        runner=FakeRunner(ProcessResult(stdout_chunks=["clean:\n", "all:\n"])),
        workers=BackgroundWorkers(max_workers=1),
        watch=False,
    )
    try:
        assert tools.application is not None

        tools.manager.set_new_target().result(timeout=5)
        deadline = time.monotonic() + 5
        while not prompt.calls and time.monotonic() < deadline:
            QCoreApplication.processEvents()
            time.sleep(0.01)

        assert prompt.calls == [(["all", "clean"], None)]
        assert tools.context.state.target == NamedTarget("clean")
    finally:
        deactivate(tools)
