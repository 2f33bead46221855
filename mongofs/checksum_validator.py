"""Cumulative MD5 checksum over a file's bytes as they are written or re-read."""

import hashlib


class IncrementalChecksumCalculator:
    """
    Calculate an MD5 checksum incrementally over a file's chunks.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(chunk0)
        calculator.update(chunk1)
        checksum = calculator.finalize()
    """

    def __init__(self):
        self._hasher = hashlib.md5()
        self._finalized = False

    def update(self, data: bytes) -> None:
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)

    def finalize(self) -> str:
        """
        Finish the calculation.

        Returns:
            Hex MD5 digest of every byte passed to update()
        """
        self._finalized = True
        return self._hasher.hexdigest()
