"""
Engine configuration: alias table, content vocabulary and fixed constants.

Build one EngineConfig at startup and pass it to the components that need it.
"""
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from content_types import DEFAULT_CONTENT_TYPES, ContentTypeClassifier, load_content_types
from date_parser import DEFAULT_YEAR
from name_aliases import NameAliasResolver, load_aliases

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 8


@dataclass
class EngineConfig:
    alias_table: dict = field(default_factory=dict)
    content_types: list = field(default_factory=lambda: list(DEFAULT_CONTENT_TYPES))
    default_year: int = DEFAULT_YEAR
    hours_per_day: float = HOURS_PER_DAY
    hour_log_year: int = DEFAULT_YEAR
    training_content_type: str = "回流訓練"
    training_years: tuple = (2023, 2025)
    reconcile_activity_type: str = "手作"
    reconcile_content_type: str = "步道實作帶領"

    def __post_init__(self):
        self.resolver = NameAliasResolver(self.alias_table)
        self.classifier = ContentTypeClassifier(self.content_types)

    @classmethod
    def load(cls, project_root=None, overrides=None):
        """
        Read reference data from project_root/reference_data.

        Args:
            project_root: Path to project root
            overrides: Optional dict with settings like:
                - default_year: int
                - hours_per_day: number
                - hour_log_year: int or None (None keeps every year)
                - training_content_type / training_years
                - reconcile_activity_type / reconcile_content_type
        """
        if overrides is None:
            overrides = {}
        if project_root is None:
            project_root = Path(__file__).parent.parent

        aliases = load_aliases(project_root)
        content_types = load_content_types(project_root)
        logger.info(f"Loaded {len(aliases)} aliases")
        logger.info(f"Loaded {len(content_types)} content types")

        defaults = cls()
        config = cls(
            alias_table=aliases,
            content_types=content_types,
            default_year=overrides.get('default_year', defaults.default_year),
            hours_per_day=overrides.get('hours_per_day', defaults.hours_per_day),
            hour_log_year=overrides.get('hour_log_year', defaults.hour_log_year),
            training_content_type=overrides.get('training_content_type', defaults.training_content_type),
            training_years=tuple(overrides.get('training_years', defaults.training_years)),
            reconcile_activity_type=overrides.get('reconcile_activity_type', defaults.reconcile_activity_type),
            reconcile_content_type=overrides.get('reconcile_content_type', defaults.reconcile_content_type),
        )

        conflicts = config.resolver.suffix_conflicts()
        for suffix, names in conflicts.items():
            logger.warning(f"Names sharing ending '{suffix}': {names}; suffix lookup picks {names[0]}")
        return config


_default_config = None
_default_lock = threading.Lock()


def get_default_config(project_root=None):
    """Process-wide config, loaded once even under concurrent first use."""
    global _default_config
    if _default_config is None:
        with _default_lock:
            if _default_config is None:
                _default_config = EngineConfig.load(project_root)
    return _default_config
