from __future__ import annotations


class PysyncdError(Exception):
    """Base error for the pysyncd library."""


class AppStateError(PysyncdError):
    """App-state snapshot/patch could not be applied."""


class KeyNotFound(AppStateError):
    """No app-state sync key is known for a key ID."""


class MissingPreviousSetValueOperation(AppStateError):
    """
    A REMOVE mutation has no prior SET value MAC for its index.

    The LT-hash cannot subtract a value it never saw, so the patch is rejected
    and the collection state is left as it was before the patch.
    """

    def __init__(self, *, index_mac: bytes, position: int) -> None:
        super().__init__(f"missing previous SET value for REMOVE mutation at position {position}")
        self.index_mac = index_mac
        self.position = position


class SnapshotMACMismatch(AppStateError):
    pass


class PatchSnapshotMACMismatch(AppStateError):
    pass


class PatchMACMismatch(AppStateError):
    pass


class MismatchingContentMAC(AppStateError):
    pass


class MismatchingIndexMAC(AppStateError):
    pass


class DecryptionFailed(AppStateError):
    pass


class VersionMismatch(AppStateError):
    """A patch does not follow the locally stored collection version."""

    def __init__(self, *, expected: int, actual: int) -> None:
        super().__init__(f"patch version mismatch (expected={expected}, got={actual})")
        self.expected = expected
        self.actual = actual
