from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class AppStateConfig:
    validate_macs: bool = True
    check_version: bool = True

    # Append applied mutations to `HashState.mutations`.
    keep_mutation_log: bool = True
