from __future__ import annotations

from pathlib import Path

from maketools.build.configurations import ConfigurationSet, MakeConfiguration
from maketools.build.resolution import (
    EffectiveBuildSettings,
    normalize_path,
    resolve,
    resolve_command,
    split_tool_path,
)


def _configurations(*records: MakeConfiguration) -> ConfigurationSet:
    return ConfigurationSet.from_records(list(records))


def test_name_from_configuration_and_directory_from_settings(tmp_path: Path) -> None:
    configurations = _configurations(MakeConfiguration("A", command_name="nmake", command_args=("/f", "Foo")))

    effective = resolve("A", "/usr/bin/make", None, configurations=configurations, project_root=tmp_path)

    assert effective.command_name == "/usr/bin/nmake"
    assert effective.command_args == ("/f", "Foo")
    assert effective.build_log is None


def test_defaults_without_any_source(tmp_path: Path) -> None:
    effective = resolve("anything", None, None, configurations=_configurations(), project_root=tmp_path)

    assert effective == EffectiveBuildSettings(command_name="make", command_args=(), build_log=None)
    assert len(effective.diagnostics) == 3


def test_configuration_directory_wins_over_settings_directory() -> None:
    record = MakeConfiguration("A", command_name="/opt/tools/gmake")
    command, args, _ = resolve_command(record, "/usr/bin/make")
    assert command == "/opt/tools/gmake"
    assert args == ()


def test_settings_supply_path_when_configuration_only_has_arguments() -> None:
    record = MakeConfiguration("A", command_args=("-j4",))
    command, args, diagnostics = resolve_command(record, "/usr/local/bin/bmake")
    assert command == "/usr/local/bin/bmake"
    assert args == ("-j4",)
    assert diagnostics == []


def test_directory_only_make_path(tmp_path: Path) -> None:
    tools = tmp_path / "tools"
    tools.mkdir()

    assert split_tool_path(str(tools)) == (str(tools), "")
    command, _, diagnostics = resolve_command(None, str(tools))

    assert command == str(tools / "make")
    assert any("Assuming make" in message for message in diagnostics)


def test_relative_name_matching_a_local_directory_is_still_a_base_name(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "make").mkdir()
    monkeypatch.chdir(tmp_path)

    assert split_tool_path("make") == ("", "make")
    command, _, _ = resolve_command(MakeConfiguration("A", command_name="make"), "/usr/bin/make")

    assert command == "/usr/bin/make"


def test_trailing_separator_marks_a_directory() -> None:
    assert split_tool_path("tools/") == ("tools", "")


def test_base_name_without_directory_warns_about_search_path() -> None:
    command, _, diagnostics = resolve_command(MakeConfiguration("A", command_name="nmake.exe"), None)
    assert command == "nmake.exe"
    assert diagnostics == ["For the build information to be available, make must be on the search path."]


def test_relative_configuration_build_log_is_joined_to_project_root() -> None:
    configurations = _configurations(MakeConfiguration("A", build_log="logs/build.log"))

    effective = resolve(
        "A", None, "/elsewhere/global.log", configurations=configurations, project_root=Path("/proj"),
        reader=lambda path: None,
    )

    assert effective.build_log == Path("/proj/logs/build.log")


def test_global_build_log_used_without_configuration_log(tmp_path: Path) -> None:
    effective = resolve("A", None, "out/dry.log", configurations=_configurations(), project_root=tmp_path)
    assert effective.build_log == tmp_path / "out" / "dry.log"


def test_readable_build_log_silences_command_warnings(tmp_path: Path, caplog) -> None:
    log = tmp_path / "build.log"
    log.write_text("all:\n", encoding="utf-8")

    with caplog.at_level("WARNING"):
        effective = resolve("A", None, str(log), configurations=_configurations(), project_root=tmp_path)

    assert effective.diagnostics == ()
    assert not [record for record in caplog.records if record.levelname == "WARNING"]


def test_missing_build_log_keeps_warnings(tmp_path: Path, caplog) -> None:
    with caplog.at_level("WARNING"):
        effective = resolve("A", None, "missing.log", configurations=_configurations(), project_root=tmp_path)

    assert effective.build_log == tmp_path / "missing.log"
    assert len(effective.diagnostics) == 3
    assert sum(record.levelname == "WARNING" for record in caplog.records) == 3


def test_normalize_path_keeps_absolute_paths() -> None:
    assert normalize_path("/var/log/make.log", Path("/proj")) == Path("/var/log/make.log")
    assert normalize_path("a/../b.log", Path("/proj")) == Path("/proj/b.log")
