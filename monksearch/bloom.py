"""Bloom filter over integer keys, backed by a numpy bit array."""

import hashlib
import math

import numpy as np


class BloomFilter:
    """
    Set membership with a tunable false positive rate and no false negatives.

    The filter is sized for ``capacity`` insertions at ``error_rate``; adding
    more keys than that raises the false positive rate gradually.
    """

    def __init__(self, error_rate, capacity):
        if not 0.0 < error_rate < 1.0:
            raise ValueError("error_rate must lie strictly between 0 and 1")
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.error_rate = error_rate
        self.capacity = capacity

        # Optimal bit count and hash count for the requested rate
        ln2 = math.log(2)
        self.num_bits = max(8, int(math.ceil(-capacity * math.log(error_rate) / (ln2 * ln2))))
        self.num_hashes = max(1, int(round(self.num_bits / capacity * ln2)))
        self.bits = np.zeros(self.num_bits, dtype=bool)
        self.count = 0

    def _indices(self, key):
        # Double hashing: index_i = h1 + i*h2 (mod m)
        width = max(1, (key.bit_length() + 7) // 8)
        digest = hashlib.blake2b(key.to_bytes(width, "little"), digest_size=16).digest()
        h1 = int.from_bytes(digest[:8], "little")
        h2 = int.from_bytes(digest[8:], "little") | 1
        return [(h1 + i * h2) % self.num_bits for i in range(self.num_hashes)]

    def add(self, key):
        self.bits[self._indices(key)] = True
        self.count += 1

    def __contains__(self, key):
        return bool(self.bits[self._indices(key)].all())

    def __len__(self):
        return self.count

    def estimated_false_positive_rate(self):
        """False positive rate implied by the number of keys added so far."""
        fill = 1.0 - math.exp(-self.num_hashes * self.count / self.num_bits)
        return fill ** self.num_hashes
