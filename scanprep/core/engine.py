"""Core engine that coordinates language detection, linter selection and option resolution."""

import os
import uuid
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from pathlib import Path

from ..models.exceptions import ConfigurationError
from ..models.interfaces import EngineLauncherInterface, TelemetrySinkInterface
from ..models.options import ProjectConfig, RunContext, RunOptions
from ..utils.environment import get_device_id_salt, is_container
from ..utils.logger import get_logger
from ..utils.statistics import EventCollector, log_os, log_project_close, log_project_open
from .languages import LanguageScanner
from .linters import VERSION, choose_engine, normalize_linter, require_engine_family, select_candidates, version_branch
from .project_config import load_project_config
from .properties import write_properties

logger = get_logger()

# Location of custom plugins inside engine containers.
CONTAINER_CUSTOM_PLUGINS_DIR = Path("/opt/idea/custom-plugins")


@dataclass
class PreparedRun:
    """Outcome of preparing a run: what was detected, chosen and written."""

    languages: list[str]
    candidates: list[str]
    linter: str
    context: RunContext
    project_config: ProjectConfig
    options_file: Path
    collector: EventCollector | None = field(default=None, repr=False)


class CoreEngine:
    """
    Core engine that ties the language scanner, the linter catalog and the
    properties resolver together for a single analysis run.
    """

    def __init__(
        self,
        scanner: LanguageScanner | None = None,
        launcher: EngineLauncherInterface | None = None,
        telemetry_sink: TelemetrySinkInterface | None = None,
        environ: MutableMapping[str, str] | None = None,
    ):
        self._scanner = scanner or LanguageScanner()
        self._launcher = launcher
        self._telemetry_sink = telemetry_sink
        self._environ = os.environ if environ is None else environ

    @property
    def scanner(self) -> LanguageScanner:
        return self._scanner

    @property
    def launcher(self) -> EngineLauncherInterface:
        """Get the engine launcher instance."""
        if self._launcher is None:
            raise RuntimeError("Engine launcher not initialized")
        return self._launcher

    def detect_languages(self, project_dir: Path) -> list[str]:
        return self.scanner.detect(project_dir)

    def select_linter(
        self,
        options: RunOptions,
        project_config: ProjectConfig,
        languages: list[str],
    ) -> tuple[str, list[str]]:
        """Choose the engine for a run.

        An explicit linter wins over the project configuration, which wins
        over detection.

        Returns:
            The chosen engine identifier and the detected candidates

        Raises:
            ConfigurationError: If no engine fits the project
        """
        candidates = select_candidates(languages)
        if options.linter:
            return normalize_linter(options.linter), candidates
        if project_config.linter:
            return normalize_linter(project_config.linter), candidates

        linter = choose_engine(candidates, native=options.native)
        if linter is None:
            mode = "native" if options.native else "container"
            raise ConfigurationError(
                f"No {mode} linter supports the detected languages: {', '.join(languages) or 'none'}",
                details={"languages": languages},
            )
        return linter, candidates

    def build_context(self, options: RunOptions, project_config: ProjectConfig, linter: str) -> RunContext:
        """Lay out the run directories and collect identity for the resolver."""
        branch = version_branch()
        custom_plugins_dir = options.custom_plugins_dir
        if custom_plugins_dir is None and is_container(self._environ):
            custom_plugins_dir = CONTAINER_CUSTOM_PLUGINS_DIR

        return RunContext(
            system_dir=options.cache_dir / "idea" / branch,
            log_dir=options.log_dir,
            conf_dir=options.cache_dir / "config" / branch,
            plugins_dir=options.cache_dir / "plugins" / branch,
            device_id_salt=get_device_id_salt(project_path=options.project_dir, environ=self._environ),
            analysis_id=options.analysis_id or str(uuid.uuid4()),
            engine_family=require_engine_family(linter),
            custom_plugins_dir=custom_plugins_dir,
            coverage_dir=options.coverage_dir,
            plugins=project_config.plugin_ids(),
            dot_net=project_config.dot_net,
            jvm_debug_port=options.jvm_debug_port,
            statistics_allowed=not options.no_statistics,
        )

    def prepare(self, options: RunOptions, collect_statistics: bool = True) -> PreparedRun:
        """Detect languages, choose the engine and write its options file."""
        project_config = load_project_config(options.project_dir)
        languages = self.detect_languages(options.project_dir)
        linter, candidates = self.select_linter(options, project_config, languages)
        logger.info(f"Selected linter {linter}", linter=linter, candidates=candidates)

        context = self.build_context(options, project_config, linter)
        options_file = write_properties(project_config.properties, options.properties, context, self._environ)

        collector = None
        if collect_statistics:
            collector = EventCollector()
            log_project_open(collector, VERSION)
            log_os(collector, VERSION)

        return PreparedRun(
            languages=languages,
            candidates=candidates,
            linter=linter,
            context=context,
            project_config=project_config,
            options_file=options_file,
            collector=collector,
        )

    def launch(self, prepared: PreparedRun) -> int:
        """Start the engine through the configured launcher."""
        return self.launcher.launch(prepared.linter, prepared.options_file)

    def finish(self, prepared: PreparedRun, options: RunOptions) -> Path | None:
        """Record the end of the run and flush collected statistics."""
        if prepared.collector is None:
            return None
        log_project_close(prepared.collector, VERSION)
        return prepared.collector.flush(
            options.tmp_results_dir,
            prepared.context.device_id,
            sink=self._telemetry_sink,
            no_statistics=options.no_statistics,
            allowed=prepared.context.statistics_allowed,
        )
