"""Resolution of engine runtime options from defaults and overrides.

Three layers feed the final option set, later layers winning per key:

1. defaults computed from the run context,
2. properties declared in the project configuration file,
3. explicit properties given for the current run.

The result is a sorted list of ``key=value`` lines and bare flags written to
the engine options file.
"""

import os
from collections.abc import Iterable, Mapping, MutableMapping
from pathlib import Path

from ..models.exceptions import ConfigurationError, CustomPluginsError, FileOperationError
from ..models.options import DotNetOptions, RunContext
from ..utils.environment import is_container, quote_if_space, target_frameworks_override, treat_as_release
from ..utils.logger import get_logger

logger = get_logger()

CONTAINER_JVM_DEBUG_PORT = "5005"
MAX_RAM_PERCENTAGE = "70"
GC_LOG_FILE_NAME = "gc.log"
PROPERTY_PREFIX = "-D"

# .NET Framework targets cannot be built inside Linux containers.
LEGACY_DOTNET_FRAMEWORKS = (
    "!net48;!net472;!net471;!net47;!net462;!net461;!net46;!net452;!net451;!net45;!net403;!net40;!net35;!net20;!net11"
)


def split_properties(raw_properties: Iterable[str]) -> tuple[dict[str, str], list[str]]:
    """Split raw explicit properties into ``key=value`` pairs and bare flags.

    An entry is a pair only when it holds exactly one ``=``; anything else
    (``-Xmx2g``, ``-Xlog:gc:file=a=b``) is kept verbatim as a flag.
    """
    properties: dict[str, str] = {}
    flags: list[str] = []
    for entry in raw_properties:
        parts = entry.split("=")
        if len(parts) == 2:
            properties[parts[0]] = parts[1]
        else:
            flags.append(entry)
    return properties, flags


def _dotnet_properties(dot_net: DotNetOptions, environ: Mapping[str, str] | None) -> dict[str, str]:
    properties: dict[str, str] = {}
    if dot_net.project:
        properties["-Dqodana.net.project"] = quote_if_space(dot_net.project)
    elif dot_net.solution:
        properties["-Dqodana.net.solution"] = quote_if_space(dot_net.solution)
    if dot_net.configuration:
        properties["-Dqodana.net.configuration"] = quote_if_space(dot_net.configuration)
    if dot_net.platform:
        properties["-Dqodana.net.platform"] = quote_if_space(dot_net.platform)
    if dot_net.frameworks:
        properties["-Dqodana.net.targetFrameworks"] = quote_if_space(dot_net.frameworks)
    elif is_container(environ) and not target_frameworks_override(environ):
        properties["-Dqodana.net.targetFrameworks"] = LEGACY_DOTNET_FRAMEWORKS
    return properties


def get_properties_map(context: RunContext, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Compute the default property layer for a run."""
    properties = {
        "-Didea.headless.enable.statistics": str(context.statistics_allowed).lower(),
        "-Didea.headless.statistics.device.id": context.device_id,
        "-Didea.headless.statistics.salt": context.salt,
        "-Didea.config.path": quote_if_space(str(context.conf_dir)),
        "-Didea.system.path": quote_if_space(str(context.system_dir)),
        "-Didea.plugins.path": quote_if_space(str(context.plugins_dir)),
        "-Didea.log.path": quote_if_space(str(context.log_dir)),
        "-Dqodana.automation.guid": quote_if_space(context.analysis_id),
        "-XX:MaxRAMPercentage": MAX_RAM_PERCENTAGE,
    }
    if context.coverage_dir is not None and str(context.coverage_dir):
        properties["-Dqodana.coverage.input"] = quote_if_space(str(context.coverage_dir))
    if context.plugins:
        properties["-Didea.required.plugins.id"] = ",".join(context.plugins)
    if context.engine_family.is_rider:
        properties.update(_dotnet_properties(context.dot_net, environ))

    logger.debug("Default properties computed", default_properties=properties)
    return properties


def get_custom_plugin_paths(directory: Path | None) -> str:
    """Comma-join the entries of the custom plugins directory.

    Raises:
        CustomPluginsError: If the directory exists but cannot be listed
    """
    if directory is None or not directory.exists():
        return ""
    try:
        names = sorted(entry.name for entry in os.scandir(directory))
    except OSError as e:
        raise CustomPluginsError(str(directory), str(e)) from e
    return ",".join(str(directory / name) for name in names)


def _as_property_key(key: str) -> str:
    return key if key.startswith("-") else f"{PROPERTY_PREFIX}{key}"


def get_properties(
    project_properties: Mapping[str, str],
    explicit_properties: Iterable[str],
    context: RunContext,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Resolve the sorted option lines for the engine.

    Args:
        project_properties: Properties declared in the project configuration
        explicit_properties: Raw ``key=value`` entries and flags for this run
        context: Paths and identity of the run
        environ: Environment to read switches from (defaults to ``os.environ``)

    Returns:
        Lexically sorted option lines
    """
    lines = [f"-Xlog:gc*:{quote_if_space(str(context.log_dir / GC_LOG_FILE_NAME))}"]
    if context.jvm_debug_port > 0:
        lines.append(
            f"-agentlib:jdwp=transport=dt_socket,server=y,suspend=y,address=*:{CONTAINER_JVM_DEBUG_PORT}",
        )
    if treat_as_release(environ):
        lines.append("-Deap.require.license=release")

    custom_plugin_paths = get_custom_plugin_paths(context.custom_plugins_dir)
    if custom_plugin_paths:
        lines.append(f"-Dplugin.path={custom_plugin_paths}")

    explicit_map, flags = split_properties(explicit_properties)
    for flag in flags:
        if flag and flag not in lines:
            lines.append(flag)

    properties = get_properties_map(context, environ)
    for key, value in project_properties.items():
        properties[_as_property_key(key)] = value
    for key, value in explicit_map.items():
        properties[_as_property_key(key)] = value

    lines.extend(f"{key}={value}" for key, value in properties.items())
    return sorted(lines)


def write_properties(
    project_properties: Mapping[str, str],
    explicit_properties: Iterable[str],
    context: RunContext,
    environ: MutableMapping[str, str] | None = None,
) -> Path:
    """Resolve options, persist them and publish the file path.

    Returns:
        Path of the written options file

    Raises:
        ConfigurationError: If the engine does not read an options file
        FileOperationError: If the options file cannot be written
    """
    env_name = context.engine_family.vm_options_env
    if env_name is None:
        raise ConfigurationError(f"Engine family '{context.engine_family.value}' does not accept JVM options")

    target_env = os.environ if environ is None else environ
    lines = get_properties(project_properties, explicit_properties, context, target_env)
    options_path = context.vm_options_path
    try:
        options_path.parent.mkdir(parents=True, exist_ok=True)
        options_path.write_text("\n".join(lines), encoding="utf-8")
    except OSError as e:
        raise FileOperationError(
            f"Failed to write options file {options_path}: {e}",
            file_path=str(options_path),
            operation="write",
        ) from e

    target_env[env_name] = str(options_path)
    logger.log_operation(
        "options_write",
        "success",
        {"message": f"Options written to {options_path}", "lines": len(lines), "env": env_name},
    )
    return options_path
