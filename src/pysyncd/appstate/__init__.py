"""
App state sync (w:sync:app:state) integrity.

Keeps the LT-hash of a collection in step with applied snapshots and patches
and derives/validates the MACs that bind them to a collection and version.
"""

from __future__ import annotations

from .hash_state import EMPTY_HASH, HashState
from .keys import ExpandedAppStateKeys, expand_app_state_keys
from .lookup import IndexValueMap, make_prev_value_lookup
from .lthash import WAPATCH_INTEGRITY, WAPATCH_INTEGRITY_INFO, LTHash
from .macs import (
    generate_content_mac,
    generate_index_mac,
    generate_patch_mac,
    generate_snapshot_mac,
    validate_content_mac,
    validate_index_mac,
    validate_patch_mac,
    validate_snapshot_mac,
)
from .processor import (
    PatchProcessingResult,
    ProcessedSnapshot,
    decode_mutation,
    decrypt_mutation_value,
    process_patch,
    process_snapshot,
)
from .types import Mutation, SyncdMutation, SyncdOperation, SyncdPatch, SyncdRecord, SyncdSnapshot

__all__ = [
    "EMPTY_HASH",
    "WAPATCH_INTEGRITY",
    "WAPATCH_INTEGRITY_INFO",
    "ExpandedAppStateKeys",
    "HashState",
    "IndexValueMap",
    "LTHash",
    "Mutation",
    "PatchProcessingResult",
    "ProcessedSnapshot",
    "SyncdMutation",
    "SyncdOperation",
    "SyncdPatch",
    "SyncdRecord",
    "SyncdSnapshot",
    "decode_mutation",
    "decrypt_mutation_value",
    "expand_app_state_keys",
    "generate_content_mac",
    "generate_index_mac",
    "generate_patch_mac",
    "generate_snapshot_mac",
    "make_prev_value_lookup",
    "process_patch",
    "process_snapshot",
    "validate_content_mac",
    "validate_index_mac",
    "validate_patch_mac",
    "validate_snapshot_mac",
]
