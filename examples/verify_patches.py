"""
Apply a SET patch and a REMOVE patch to an empty collection and print the
resulting LT-hash and snapshot MAC after each step.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import replace

from pysyncd.appstate import (
    HashState,
    IndexValueMap,
    SyncdMutation,
    SyncdOperation,
    SyncdPatch,
    SyncdRecord,
    expand_app_state_keys,
    generate_content_mac,
    generate_index_mac,
    generate_patch_mac,
    make_prev_value_lookup,
    process_patch,
)
from pysyncd.crypto import aes_encrypt_cbc_pkcs7

NAME = "regular_high"
KEY_ID = b"example_key"


def _record(keys, op: SyncdOperation, index: list[str], plaintext: bytes) -> SyncdRecord:
    iv = secrets.token_bytes(16)
    body = iv + aes_encrypt_cbc_pkcs7(plaintext, key=keys.value_encryption, iv=iv)
    return SyncdRecord(
        index_mac=generate_index_mac(index, keys.index),
        value_blob=body + generate_content_mac(op, body, KEY_ID, keys.value_mac),
        key_id=KEY_ID,
    )


def _signed(keys, patch: SyncdPatch, state: HashState, values: IndexValueMap) -> SyncdPatch:
    # Stand-in for the server side: commit to the state after the patch.
    tmp = state.copy()
    tmp.update_hash(patch.mutations, make_prev_value_lookup(patch.mutations, values.get))
    tmp.version = patch.version
    patch = replace(patch, snapshot_mac=tmp.generate_snapshot_mac(NAME, keys.snapshot_mac))
    return replace(patch, patch_mac=generate_patch_mac(patch, NAME, keys.patch_mac))


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)
    keys = expand_app_state_keys(secrets.token_bytes(32))
    state, values = HashState(), IndexValueMap()
    index = ["mute", "123@s.whatsapp.net"]

    steps = [
        (SyncdOperation.SET, b"muted-until:1700000000"),
        (SyncdOperation.REMOVE, b""),
    ]
    for version, (op, plaintext) in enumerate(steps, start=1):
        mutation = SyncdMutation(op, _record(keys, op, index, plaintext))
        patch = _signed(keys, SyncdPatch(version=version, mutations=[mutation], key_id=KEY_ID), state, values)
        res = process_patch(patch, state, values, lambda _kid: keys, collection_name=NAME)
        state, values = res.state, res.index_values
        print(f"v{state.version} {op.name}: hash={state.hash[:8].hex()}... mac={state.generate_snapshot_mac(NAME, keys.snapshot_mac).hex()}")


if __name__ == "__main__":
    main()
