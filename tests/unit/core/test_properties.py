"""Tests for engine option resolution."""

from pathlib import Path

import pytest

from scanprep.core.properties import (
    LEGACY_DOTNET_FRAMEWORKS,
    get_custom_plugin_paths,
    get_properties,
    get_properties_map,
    split_properties,
    write_properties,
)
from scanprep.models.exceptions import ConfigurationError, CustomPluginsError, FileOperationError
from scanprep.models.interfaces import EngineFamily
from scanprep.models.options import DotNetOptions, RunContext


def make_context(root: Path, **overrides) -> RunContext:
    values = {
        "system_dir": root / "cache" / "idea",
        "log_dir": root / "results" / "log",
        "conf_dir": root / "cache" / "config",
        "plugins_dir": root / "cache" / "plugins",
        "device_id_salt": ("device", "salt"),
        "analysis_id": "run-1",
        "engine_family": EngineFamily.JVM,
    }
    values.update(overrides)
    return RunContext(**values)


def as_dict(lines: list[str]) -> dict[str, str]:
    return dict(line.split("=", 1) for line in lines if "=" in line and not line.startswith("-agentlib"))


class TestSplitProperties:
    def test_pairs_and_flags(self) -> None:
        properties, flags = split_properties(["a=1", "-Xmx2g", "-Dx=y", "c=d=e", ""])

        assert properties == {"a": "1", "-Dx": "y"}
        assert flags == ["-Xmx2g", "c=d=e", ""]


class TestPropertiesMap:
    """Default property layer."""

    def test_defaults(self, tmp_path: Path) -> None:
        context = make_context(tmp_path, statistics_allowed=True)

        properties = get_properties_map(context, environ={})

        assert properties["-Didea.headless.enable.statistics"] == "true"
        assert properties["-Didea.headless.statistics.device.id"] == "device"
        assert properties["-Didea.headless.statistics.salt"] == "salt"
        assert properties["-Didea.config.path"] == str(tmp_path / "cache" / "config")
        assert properties["-Didea.system.path"] == str(tmp_path / "cache" / "idea")
        assert properties["-Didea.plugins.path"] == str(tmp_path / "cache" / "plugins")
        assert properties["-Didea.log.path"] == str(tmp_path / "results" / "log")
        assert properties["-Dqodana.automation.guid"] == "run-1"
        assert properties["-XX:MaxRAMPercentage"] == "70"
        assert "-Dqodana.coverage.input" not in properties
        assert "-Didea.required.plugins.id" not in properties
        assert not any(key.startswith("-Dqodana.net") for key in properties)

    def test_statistics_disabled(self, tmp_path: Path) -> None:
        properties = get_properties_map(make_context(tmp_path), environ={})

        assert properties["-Didea.headless.enable.statistics"] == "false"

    def test_paths_with_spaces_are_quoted(self, tmp_path: Path) -> None:
        context = make_context(tmp_path, conf_dir=tmp_path / "my config", analysis_id="my run")

        properties = get_properties_map(context, environ={})

        assert properties["-Didea.config.path"] == f'"{tmp_path / "my config"}"'
        assert properties["-Dqodana.automation.guid"] == '"my run"'

    def test_coverage_and_plugins(self, tmp_path: Path) -> None:
        context = make_context(
            tmp_path,
            coverage_dir=tmp_path / "coverage",
            plugins=["org.intellij.scala", "com.example.plugin"],
        )

        properties = get_properties_map(context, environ={})

        assert properties["-Dqodana.coverage.input"] == str(tmp_path / "coverage")
        assert properties["-Didea.required.plugins.id"] == "org.intellij.scala,com.example.plugin"


class TestDotNetProperties:
    """.NET attributes for Rider based engines."""

    def test_project_wins_over_solution(self, tmp_path: Path) -> None:
        dot_net = DotNetOptions(project="App.csproj", solution="App.sln", configuration="Release", platform="x64")
        context = make_context(tmp_path, engine_family=EngineFamily.DOTNET_STANDALONE, dot_net=dot_net)

        properties = get_properties_map(context, environ={})

        assert properties["-Dqodana.net.project"] == "App.csproj"
        assert "-Dqodana.net.solution" not in properties
        assert properties["-Dqodana.net.configuration"] == "Release"
        assert properties["-Dqodana.net.platform"] == "x64"
        assert "-Dqodana.net.targetFrameworks" not in properties

    def test_solution_with_space(self, tmp_path: Path) -> None:
        context = make_context(
            tmp_path,
            engine_family=EngineFamily.DOTNET_STANDALONE,
            dot_net=DotNetOptions(solution="My App.sln"),
        )

        assert get_properties_map(context, environ={})["-Dqodana.net.solution"] == '"My App.sln"'

    def test_container_excludes_legacy_frameworks(self, tmp_path: Path) -> None:
        context = make_context(tmp_path, engine_family=EngineFamily.DOTNET_CONTAINER_FULL)

        properties = get_properties_map(context, environ={"QODANA_DOCKER": "true"})

        assert properties["-Dqodana.net.targetFrameworks"] == LEGACY_DOTNET_FRAMEWORKS

    def test_environment_override_suppresses_denylist(self, tmp_path: Path) -> None:
        context = make_context(tmp_path, engine_family=EngineFamily.DOTNET_CONTAINER_FULL)
        environ = {"QODANA_DOCKER": "true", "QODANA_NET_TARGET_FRAMEWORKS": "net6.0"}

        assert "-Dqodana.net.targetFrameworks" not in get_properties_map(context, environ=environ)

    def test_declared_frameworks_win(self, tmp_path: Path) -> None:
        context = make_context(
            tmp_path,
            engine_family=EngineFamily.DOTNET_CONTAINER_FULL,
            dot_net=DotNetOptions(frameworks="net6.0;net7.0"),
        )

        properties = get_properties_map(context, environ={"QODANA_DOCKER": "true"})

        assert properties["-Dqodana.net.targetFrameworks"] == "net6.0;net7.0"

    def test_non_rider_engines_get_no_dotnet_keys(self, tmp_path: Path) -> None:
        context = make_context(
            tmp_path,
            engine_family=EngineFamily.DOTNET_CONTAINER_COMMUNITY,
            dot_net=DotNetOptions(project="App.csproj"),
        )

        properties = get_properties_map(context, environ={"QODANA_DOCKER": "true"})

        assert not any(key.startswith("-Dqodana.net") for key in properties)


class TestCustomPlugins:
    def test_missing_directory(self, tmp_path: Path) -> None:
        assert get_custom_plugin_paths(None) == ""
        assert get_custom_plugin_paths(tmp_path / "missing") == ""

    def test_entries_are_sorted(self, tmp_path: Path) -> None:
        (tmp_path / "b-plugin").mkdir()
        (tmp_path / "a-plugin.jar").write_bytes(b"")

        assert get_custom_plugin_paths(tmp_path) == f"{tmp_path / 'a-plugin.jar'},{tmp_path / 'b-plugin'}"

    def test_unreadable_directory(self, tmp_path: Path) -> None:
        not_a_directory = tmp_path / "plugins"
        not_a_directory.write_text("", encoding="utf-8")

        with pytest.raises(CustomPluginsError) as exc_info:
            get_custom_plugin_paths(not_a_directory)

        assert exc_info.value.details["operation"] == "list"
        assert exc_info.value.details["file_path"] == str(not_a_directory)


class TestGetProperties:
    """Layer merging and output shape."""

    def test_output_is_sorted_and_stable(self, tmp_path: Path) -> None:
        context = make_context(tmp_path)

        first = get_properties({"b": "1"}, ["z=1", "-Xmx2g"], context, environ={})
        second = get_properties({"b": "1"}, ["z=1", "-Xmx2g"], context, environ={})

        assert first == sorted(first)
        assert first == second

    def test_gc_log_line(self, tmp_path: Path) -> None:
        lines = get_properties({}, [], make_context(tmp_path), environ={})

        assert f"-Xlog:gc*:{tmp_path / 'results' / 'log' / 'gc.log'}" in lines

    def test_explicit_beats_project(self, tmp_path: Path) -> None:
        lines = get_properties({"my.key": "2"}, ["my.key=3"], make_context(tmp_path), environ={})

        assert "-Dmy.key=3" in lines
        assert "-Dmy.key=2" not in lines

    def test_project_beats_defaults(self, tmp_path: Path) -> None:
        lines = get_properties({"-XX:MaxRAMPercentage": "50"}, [], make_context(tmp_path), environ={})

        assert as_dict(lines)["-XX:MaxRAMPercentage"] == "50"
        assert "-XX:MaxRAMPercentage=70" not in lines

    def test_explicit_beats_defaults(self, tmp_path: Path) -> None:
        lines = get_properties({}, ["-Dqodana.automation.guid=other"], make_context(tmp_path), environ={})

        assert as_dict(lines)["-Dqodana.automation.guid"] == "other"

    def test_flags_are_kept_once(self, tmp_path: Path) -> None:
        context = make_context(tmp_path)
        gc_line = f"-Xlog:gc*:{tmp_path / 'results' / 'log' / 'gc.log'}"

        lines = get_properties({}, ["-Xmx2g", "-Xmx2g", gc_line], context, environ={})

        assert lines.count("-Xmx2g") == 1
        assert lines.count(gc_line) == 1

    def test_debug_port(self, tmp_path: Path) -> None:
        lines = get_properties({}, [], make_context(tmp_path, jvm_debug_port=5006), environ={})

        assert "-agentlib:jdwp=transport=dt_socket,server=y,suspend=y,address=*:5005" in lines

    def test_no_debug_by_default(self, tmp_path: Path) -> None:
        lines = get_properties({}, [], make_context(tmp_path), environ={})

        assert not any(line.startswith("-agentlib") for line in lines)

    def test_treat_as_release(self, tmp_path: Path) -> None:
        context = make_context(tmp_path)

        assert "-Deap.require.license=release" in get_properties(
            {}, [], context, environ={"QODANA_TREAT_AS_RELEASE": "true"}
        )
        assert "-Deap.require.license=release" not in get_properties({}, [], context, environ={})

    def test_custom_plugins_line(self, tmp_path: Path) -> None:
        plugins = tmp_path / "custom"
        plugins.mkdir()
        (plugins / "one.jar").write_bytes(b"")
        context = make_context(tmp_path, custom_plugins_dir=plugins)

        lines = get_properties({}, [], context, environ={})

        assert f"-Dplugin.path={plugins / 'one.jar'}" in lines

    def test_unreadable_custom_plugins_propagates(self, tmp_path: Path) -> None:
        broken = tmp_path / "custom"
        broken.write_text("", encoding="utf-8")

        with pytest.raises(CustomPluginsError):
            get_properties({}, [], make_context(tmp_path, custom_plugins_dir=broken), environ={})


class TestWriteProperties:
    """Persisting the options file."""

    def test_writes_file_and_publishes_env(self, tmp_path: Path) -> None:
        context = make_context(tmp_path)
        environ: dict[str, str] = {}

        path = write_properties({"a": "1"}, ["-Xmx1g"], context, environ=environ)

        assert path == tmp_path / "cache" / "config" / "ide.vmoptions"
        assert environ == {"IDEA_VM_OPTIONS": str(path)}
        expected = get_properties({"a": "1"}, ["-Xmx1g"], context, environ={})
        assert path.read_text(encoding="utf-8") == "\n".join(expected)

    def test_env_name_follows_family(self, tmp_path: Path) -> None:
        environ: dict[str, str] = {}

        write_properties({}, [], make_context(tmp_path, engine_family=EngineFamily.GO), environ=environ)

        assert "GOLAND_VM_OPTIONS" in environ

    def test_engine_without_options_file(self, tmp_path: Path) -> None:
        context = make_context(tmp_path, engine_family=EngineFamily.DOTNET_CONTAINER_COMMUNITY)

        with pytest.raises(ConfigurationError):
            write_properties({}, [], context, environ={})

    def test_write_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        context = make_context(tmp_path, conf_dir=blocker)
        environ: dict[str, str] = {}

        with pytest.raises(FileOperationError) as exc_info:
            write_properties({}, [], context, environ=environ)

        assert exc_info.value.details["operation"] == "write"
        assert environ == {}
