from __future__ import annotations

from pathlib import Path

from maketools.build.configurations import ConfigurationStore, MakeConfiguration, configurations_path


def test_missing_file_is_an_empty_set(project: Path, caplog) -> None:
    store = ConfigurationStore(configurations_path(project))
    errors: list[str] = []
    store.error_occurred.connect(errors.append)

    with caplog.at_level("INFO"):
        configurations = store.load()

    assert len(configurations) == 0
    assert errors == []
    assert any("not found" in record.message for record in caplog.records)


def test_load_reads_records_in_file_order(write_configurations) -> None:
    path = write_configurations(
        [
            {"name": "Debug", "commandName": "make", "commandArgs": ["BUILD=debug"]},
            {"name": "Release", "buildLog": "logs/release.log"},
        ]
    )
    store = ConfigurationStore(path)

    store.load()

    assert store.names() == ["Debug", "Release"]
    assert store.lookup("Debug") == MakeConfiguration("Debug", "make", ("BUILD=debug",), None)
    assert store.lookup("Release").build_log == "logs/release.log"
    assert store.lookup("Missing") is None


def test_first_record_with_a_name_wins(write_configurations) -> None:
    path = write_configurations(
        [
            {"name": "A", "commandName": "nmake"},
            {"name": "A", "commandName": "gmake"},
        ]
    )
    store = ConfigurationStore(path)
    store.load()

    assert store.names() == ["A"]
    assert store.lookup("A").command_name == "nmake"


def test_malformed_json_keeps_previous_set_and_reports(write_configurations) -> None:
    path = write_configurations([{"name": "Debug"}])
    store = ConfigurationStore(path)
    store.load()
    errors: list[str] = []
    store.error_occurred.connect(errors.append)

    write_configurations("[{ not json")
    configurations = store.load()

    assert configurations.names() == ["Debug"]
    assert len(errors) == 1
    assert "make_configurations.json" in errors[0]


def test_non_list_document_is_reported(write_configurations) -> None:
    store = ConfigurationStore(write_configurations({"name": "Debug"}))
    errors: list[str] = []
    store.error_occurred.connect(errors.append)

    store.load()

    assert errors
    assert store.names() == []


def test_invalid_entries_are_skipped(write_configurations) -> None:
    path = write_configurations(
        [
            "Debug",
            {"commandName": "make"},
            {"name": "Ok", "commandArgs": "not-a-list"},
        ]
    )
    store = ConfigurationStore(path)
    store.load()

    assert store.names() == ["Ok"]
    assert store.lookup("Ok").command_args is None


def test_is_configurations_file_normalizes_paths(project: Path) -> None:
    store = ConfigurationStore(configurations_path(project))
    assert store.is_configurations_file(project / ".maketools" / ".." / ".maketools" / "make_configurations.json")
    assert not store.is_configurations_file(project / "Makefile")


def test_store_and_parser_log_through_one_module_logger(write_configurations, caplog) -> None:
    path = write_configurations([{"commandName": "make"}])
    store = ConfigurationStore(path)

    with caplog.at_level("INFO", logger="maketools.build.configurations"):
        store.load()

    messages = {record.message.split(" ")[0] for record in caplog.records}
    assert {"Reading", "Skipping"} <= messages
    assert {record.name for record in caplog.records} == {"maketools.build.configurations"}
