from __future__ import annotations

import hashlib
import json
import logging
import random
import secrets
from dataclasses import dataclass
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

Seed = Union[int, str, bytes, None]


def _to_stable_json(value: Any) -> str:
    """Stable JSON encoding for hashing.

    Ensures consistent ordering and representation across runs, which keeps
    seed derivation deterministic.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class RNGManager:
    """Central deterministic RNG manager for one game session.

    Every random decision of the engine draws from a stream derived from the
    master seed and a domain name, so layouts, placements and AI rolls are
    reproducible for a given seed regardless of the order the domains are used.

    Usage pattern:
        rngm = RNGManager(seed)
        layout_rng = rngm.context_rng("floor_layout", floor)
        gameplay_rng = rngm.context_rng("gameplay")
    """

    master_seed: Seed

    def __post_init__(self) -> None:
        if self.master_seed is None:
            rand = secrets.token_bytes(16)
            object.__setattr__(self, "_master_seed_bytes", rand)
            logger.info("No master seed provided; generated random seed: %s", rand.hex())
        else:
            object.__setattr__(self, "_master_seed_bytes", self._canonicalize_seed(self.master_seed))
            logger.debug("Using master seed: %r", self.master_seed)

    @staticmethod
    def _canonicalize_seed(seed: Optional[Union[int, str, bytes]]) -> bytes:
        if seed is None:
            return b""
        if isinstance(seed, bytes):
            return seed
        if isinstance(seed, bool):
            raise TypeError("Unsupported seed type: %r" % (type(seed),))
        if isinstance(seed, int):
            length = (seed.bit_length() + 7) // 8 or 1
            return seed.to_bytes(length, "big", signed=seed < 0)
        if isinstance(seed, str):
            return seed.strip().encode("utf-8")
        raise TypeError("Unsupported seed type: %r" % (type(seed),))

    def derive_seed(self, domain: str, *identifiers: Any) -> int:
        """Derive a 64-bit integer seed from the master seed and a domain.

        Domains used by the engine: "floor_layout", "placement", "catalog_ids",
        "gameplay". Identifiers are usually a floor index.
        """
        payload = {
            "domain": domain,
            "ids": identifiers,
            "master": self._master_seed_bytes.hex(),
            "algo": "blake2b-64",
        }
        data = _to_stable_json(payload).encode("utf-8")
        digest = hashlib.blake2b(data, digest_size=8).digest()
        seed_int = int.from_bytes(digest, "big", signed=False)
        logger.debug("Derived seed for domain=%s ids=%s -> %d", domain, identifiers, seed_int)
        return seed_int

    def context_rng(self, domain: str, *identifiers: Any) -> random.Random:
        return random.Random(self.derive_seed(domain, *identifiers))

    def get_master_seed_hex(self) -> str:
        return self._master_seed_bytes.hex()
