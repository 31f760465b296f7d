"""Update engine: resolve newer versions and rewrite dependencies."""

from depsupdater.updater.ecosystems import (
    ECOSYSTEMS,
    EcosystemUpdater,
    build_updaters,
    dispatch,
)
from depsupdater.updater.models import BatchResult, UpdateOutcome
from depsupdater.updater.policy import accept, select_latest
from depsupdater.updater.runner import UpdateRunner
from depsupdater.updater.versioning import SemanticVersion, parse_npm_version, parse_version

__all__ = [
    "ECOSYSTEMS",
    "BatchResult",
    "EcosystemUpdater",
    "SemanticVersion",
    "UpdateOutcome",
    "UpdateRunner",
    "accept",
    "build_updaters",
    "dispatch",
    "parse_npm_version",
    "parse_version",
    "select_latest",
]
