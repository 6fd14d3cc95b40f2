"""
Snapshot/patch application with MAC verification.

A patch is applied all-or-nothing: the LT-hash update, MAC checks and record
decoding run against copies of the caller's state, and only a fully verified
result is returned.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..config import AppStateConfig
from ..crypto.aes import aes_decrypt_cbc_pkcs7
from ..exceptions import (
    AppStateError,
    DecryptionFailed,
    KeyNotFound,
    PatchSnapshotMACMismatch,
    SnapshotMACMismatch,
    VersionMismatch,
)
from ..util.bytes import b64encode
from .hash_state import HashState
from .keys import ExpandedAppStateKeys
from .lookup import IndexValueMap, make_prev_value_lookup
from .macs import (
    validate_content_mac,
    validate_index_mac,
    validate_patch_mac,
    validate_snapshot_mac,
)
from .types import (
    VALUE_MAC_LENGTH,
    Mutation,
    SyncdMutation,
    SyncdOperation,
    SyncdPatch,
    SyncdRecord,
    SyncdSnapshot,
)

logger = logging.getLogger(__name__)

_IV_LENGTH = 16

KeyLookup = Callable[[bytes], "ExpandedAppStateKeys | None"]
# plaintext SyncActionData bytes -> (raw JSON index bytes, action value)
ActionDecoder = Callable[[bytes], "tuple[bytes, Any]"]


@dataclass(frozen=True, slots=True)
class ProcessedSnapshot:
    state: HashState
    index_values: IndexValueMap
    mutations: list[Mutation]


@dataclass(frozen=True, slots=True)
class PatchProcessingResult:
    state: HashState
    index_values: IndexValueMap
    mutations: list[Mutation]


def _get_keys(get_keys: KeyLookup, key_id: bytes) -> ExpandedAppStateKeys:
    keys = get_keys(key_id)
    if keys is None:
        raise KeyNotFound(f"no app state key for key ID {b64encode(key_id)}")
    return keys


def _validate_state_mac(
    state: HashState, expected: bytes, collection_name: str, keys: ExpandedAppStateKeys
) -> None:
    validate_snapshot_mac(expected, state.hash, state.version, collection_name, keys.snapshot_mac)


def decrypt_mutation_value(
    operation: SyncdOperation,
    record: SyncdRecord,
    keys: ExpandedAppStateKeys,
    *,
    validate_macs: bool,
) -> bytes:
    blob = record.value_blob
    if len(blob) < _IV_LENGTH + VALUE_MAC_LENGTH:
        raise AppStateError("value blob too short")
    content = blob[:-VALUE_MAC_LENGTH]
    if validate_macs:
        validate_content_mac(operation, content, record.key_id, record.value_mac, keys.value_mac)
    try:
        return aes_decrypt_cbc_pkcs7(content[_IV_LENGTH:], key=keys.value_encryption, iv=content[:_IV_LENGTH])
    except ValueError as e:
        raise DecryptionFailed(str(e)) from e


def _parse_index(raw: bytes) -> list[str]:
    try:
        parsed = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise AppStateError(f"invalid index JSON: {e}") from e
    if not isinstance(parsed, list):
        raise AppStateError("index JSON is not a list")
    return [str(x) for x in parsed]


def decode_mutation(
    operation: SyncdOperation,
    record: SyncdRecord,
    keys: ExpandedAppStateKeys,
    *,
    validate_macs: bool,
    decode_action: ActionDecoder | None = None,
) -> Mutation:
    plaintext = decrypt_mutation_value(operation, record, keys, validate_macs=validate_macs)
    index: list[str] = []
    action: Any | None = plaintext
    if decode_action is not None:
        raw_index, action = decode_action(plaintext)
        if raw_index:
            # the MAC covers the sender's exact JSON bytes, not a re-encoding
            if validate_macs:
                validate_index_mac(bytes(raw_index), record.index_mac, keys.index)
            index = _parse_index(bytes(raw_index))
    return Mutation(
        operation=SyncdOperation(operation),
        action=action,
        index=list(index),
        index_mac=record.index_mac,
        value_mac=record.value_mac,
    )


def process_snapshot(
    snapshot: SyncdSnapshot,
    get_keys: KeyLookup,
    *,
    collection_name: str,
    config: AppStateConfig | None = None,
    decode_action: ActionDecoder | None = None,
) -> ProcessedSnapshot:
    cfg = config or AppStateConfig()
    state = HashState(version=int(snapshot.version))
    state.update_hash_from_records(snapshot.records)

    if cfg.validate_macs:
        keys = _get_keys(get_keys, snapshot.key_id)
        try:
            _validate_state_mac(state, snapshot.mac, collection_name, keys)
        except SnapshotMACMismatch:
            logger.warning("snapshot %s v%d rejected: MAC mismatch", collection_name, state.version)
            raise

    index_values = IndexValueMap()
    mutations: list[Mutation] = []
    for rec in snapshot.records:
        keys = _get_keys(get_keys, rec.key_id)
        mutations.append(
            decode_mutation(
                SyncdOperation.SET,
                rec,
                keys,
                validate_macs=cfg.validate_macs,
                decode_action=decode_action,
            )
        )
        index_values.set(rec.index_mac, rec.value_mac)

    if cfg.keep_mutation_log:
        state.mutations.extend(mutations)
    logger.debug("snapshot %s applied at v%d (%d records)", collection_name, state.version, len(mutations))
    return ProcessedSnapshot(state=state, index_values=index_values, mutations=mutations)


def process_patch(
    patch: SyncdPatch,
    state: HashState,
    index_values: IndexValueMap,
    get_keys: KeyLookup,
    *,
    collection_name: str,
    config: AppStateConfig | None = None,
    decode_action: ActionDecoder | None = None,
) -> PatchProcessingResult:
    """
    Verify and apply one patch on top of `state` / `index_values`.

    Neither argument is modified; on success the caller replaces them with the
    returned objects. Any `AppStateError` means the patch was not applied.
    """

    cfg = config or AppStateConfig()
    try:
        return _process_patch(patch, state, index_values, get_keys, collection_name, cfg, decode_action)
    except AppStateError as e:
        logger.warning("patch %s v%d rejected: %s", collection_name, patch.version, e)
        raise


def _process_patch(
    patch: SyncdPatch,
    state: HashState,
    index_values: IndexValueMap,
    get_keys: KeyLookup,
    collection_name: str,
    cfg: AppStateConfig,
    decode_action: ActionDecoder | None,
) -> PatchProcessingResult:
    if cfg.check_version and not state.is_empty and patch.version != state.version + 1:
        raise VersionMismatch(expected=state.version + 1, actual=patch.version)

    new_state = state.copy()
    mutations: list[SyncdMutation] = list(patch.mutations)
    new_state.update_hash(mutations, make_prev_value_lookup(mutations, index_values.get))
    new_state.version = int(patch.version)

    if cfg.validate_macs:
        keys = _get_keys(get_keys, patch.key_id)
        try:
            _validate_state_mac(new_state, patch.snapshot_mac, collection_name, keys)
        except SnapshotMACMismatch as e:
            raise PatchSnapshotMACMismatch("patch snapshot MAC mismatch") from e
        validate_patch_mac(patch, collection_name, keys.patch_mac)

    applied: list[Mutation] = []
    for m in mutations:
        keys = _get_keys(get_keys, m.record.key_id)
        applied.append(
            decode_mutation(
                m.operation,
                m.record,
                keys,
                validate_macs=cfg.validate_macs,
                decode_action=decode_action,
            )
        )

    new_values = index_values.copy()
    new_values.apply(mutations)
    if cfg.keep_mutation_log:
        new_state.mutations.extend(applied)

    logger.debug(
        "patch %s applied: v%d -> v%d (%d mutations)",
        collection_name,
        state.version,
        new_state.version,
        len(applied),
    )
    return PatchProcessingResult(state=new_state, index_values=new_values, mutations=applied)
