"""Configuration for code generation requests.

Options can be set in code or loaded from a YAML file of the form::

    codegen:
      duplicate_parameters: error     # first_wins or last_wins
      memoize: true
      annotate_meta: false
      spool_max_size: 1048576
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

import yaml

from sym2c.core.errors import ConfigError

logger = logging.getLogger(__name__)

DUPLICATE_POLICIES = ("error", "first_wins", "last_wins")


@dataclass(frozen=True)
class CodeGenConfig:
    """Options shared by all emission drivers.

    Attributes:
        duplicate_parameters: "error" rejects a variable listed twice in the
            parameter list, "first_wins" keeps the earlier index and
            "last_wins" the later one
        memoize: Reuse rendered text for a node instance seen earlier in the
            same request (output is identical either way)
        annotate_meta: Emit "/* p: input, vector */" style comments in the
            metadata struct
        spool_max_size: Bytes of staged matrix output kept in memory before
            spilling to a temporary file
    """
    duplicate_parameters: str = "error"
    memoize: bool = True
    annotate_meta: bool = False
    spool_max_size: int = 1 << 20

    def __post_init__(self) -> None:
        if self.duplicate_parameters not in DUPLICATE_POLICIES:
            raise ConfigError(
                f"duplicate_parameters must be one of {', '.join(DUPLICATE_POLICIES)}, "
                f"got {self.duplicate_parameters!r}"
            )
        for name in ("memoize", "annotate_meta"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be a boolean")
        if isinstance(self.spool_max_size, bool) or not isinstance(self.spool_max_size, int) \
                or self.spool_max_size < 0:
            raise ConfigError("spool_max_size must be a non-negative integer")

    @classmethod
    def from_dict(cls, settings: Dict[str, Any]) -> "CodeGenConfig":
        """Build a config from a mapping of option names

        Args:
            settings: Option name to value

        Returns:
            CodeGenConfig

        Raises:
            ConfigError: On unknown option names or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise ConfigError(f"Unknown codegen option(s): {', '.join(unknown)}")
        return cls(**settings)

    @classmethod
    def load_from_yaml(cls, path: Path) -> "CodeGenConfig":
        """Load config from YAML config file.

        A missing file or a file without a ``codegen`` section yields the
        defaults.

        Args:
            path: Path to YAML config file

        Returns:
            CodeGenConfig
        """
        path = Path(path)
        if not path.exists():
            logger.warning("Codegen config %s not found, using defaults", path)
            return cls()

        with open(path, 'r', encoding='utf-8') as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {path}: {e}") from e

        if not config or 'codegen' not in config:
            logger.debug("No codegen section in %s", path)
            return cls()

        settings = config['codegen'] or {}
        if not isinstance(settings, dict):
            raise ConfigError(f"'codegen' in {path} must be a mapping")
        logger.debug("Loaded codegen config from %s: %s", path, settings)
        return cls.from_dict(settings)
