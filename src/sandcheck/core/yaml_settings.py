"""YAML configuration loading with include directive support."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

from sandcheck.core.log import logger

DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"

# Arguments being parsed by the CLI, when not taken from sys.argv
_cli_args: ContextVar[list[str] | None] = ContextVar("cli_args", default=None)


@contextmanager
def cli_arguments(args: list[str]) -> Iterator[None]:
    """Scan args, not sys.argv, for --include while the block runs."""
    token = _cli_args.set(list(args))
    try:
        yield
    finally:
        _cli_args.reset(token)


def _cli_includes(args: list[str]) -> list[str]:
    """Collect the values of every --include option in args."""
    includes = []
    for i, arg in enumerate(args):
        if arg == "--include" and i + 1 < len(args):
            includes.append(args[i + 1])
        elif arg.startswith("--include="):
            includes.append(arg.split("=", 1)[1])
    return includes


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """YAML settings source with include: directive and --include
    CLI support.

    Deep merges, lowest priority first: package defaults, user config
    (platform-specific location), project config (./sandcheck.yaml),
    then --include files. Any file may pull in others with an
    include: key; those load beneath the including file.
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file=None,
        cli_args: list[str] | None = None,
    ):
        """Initialize with CLI include processing.

        Args:
            settings_cls: The Settings class being initialized
            yaml_file: Optional override for the project config path
            cli_args: Command-line arguments to scan for --include
                (the arguments set by cli_arguments(), else
                sys.argv[1:], if None)
        """
        self.project_file = Path(
            yaml_file or settings_cls.model_config.get("yaml_file")
            or "sandcheck.yaml"
        )
        if cli_args is None:
            cli_args = _cli_args.get()
        if cli_args is None:
            cli_args = sys.argv[1:]
        includes = _cli_includes(cli_args)
        super().__init__(settings_cls, includes or None)

    def _read_files(self, files, deep_merge: bool = False):
        """Load defaults, user config, project config, and CLI includes.

        Args:
            files: CLI include file path(s) from --include arguments
            deep_merge: Ignored; files are always deep-merged

        Returns:
            Deep-merged dictionary of all loaded data
        """
        files_to_load = [
            DEFAULTS_FILE,
            Path(user_config_dir("sandcheck", appauthor=False))
            / "sandcheck.yaml",
            self.project_file,
        ]

        if files:
            if isinstance(files, (str, os.PathLike)):
                files = [files]
            files_to_load.extend(Path(f).expanduser() for f in files)

        result = {}
        for file_path in files_to_load:
            if file_path.is_file():
                logger.debug("Loading configuration", file=str(file_path))
                data = self._load_file_recursive(file_path, set())
                result = self._deep_merge(result, data)
            else:
                logger.debug(
                    "Configuration file not found (skipping)",
                    file=str(file_path),
                )
        return result

    def _load_file_recursive(
        self, filepath: Path, visited: set[Path]
    ) -> dict:
        """Load file and process include: directives recursively.

        Args:
            filepath: Path to YAML file to load
            visited: Files already on the current include chain

        Returns:
            Dictionary with all includes resolved and merged

        Raises:
            ValueError: If circular include detected
            FileNotFoundError: If an included file does not exist
        """
        filepath = filepath.resolve()
        if filepath in visited:
            raise ValueError(f"Circular include: {filepath}")
        visited.add(filepath)

        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        includes = data.pop("include", None) or []
        if isinstance(includes, str):
            includes = [includes]

        # Included files are the base, the including file overrides them
        merged = {}
        for inc in includes:
            inc_path = Path(inc).expanduser()
            if not inc_path.is_absolute():
                inc_path = filepath.parent / inc_path
            merged = self._deep_merge(
                merged, self._load_file_recursive(inc_path, visited.copy())
            )
        return self._deep_merge(merged, data)

    @classmethod
    def _deep_merge(cls, base: dict, override: dict) -> dict:
        """Deep merge override into base (override wins).

        Args:
            base: Base dictionary
            override: Override dictionary (takes precedence)

        Returns:
            New dictionary with deep merge applied
        """
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = cls._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
