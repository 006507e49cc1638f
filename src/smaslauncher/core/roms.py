from __future__ import annotations
from typing import Iterable, Mapping

from .models import RomSpec

# US retail dumps, no copier header.
SMAS_SHA1 = "c05817c5b7df2fbfe631563e0b37237156a8f6b6"
SMW_SHA1 = "6b47bb75d16514b6a476aa0c73a683a2a4c18765"

SMAS = RomSpec(
    canonical_name="smas",
    filenames=("smas.sfc", "smas.smc"),
    size=0x200000,
    checksums=frozenset({SMAS_SHA1}),
)

SMW = RomSpec(
    canonical_name="smw",
    filenames=("smw.sfc", "smw.smc"),
    size=0x80000,
    checksums=frozenset({SMW_SHA1}),
)

REQUIRED_ROMS: tuple[RomSpec, ...] = (SMAS, SMW)


def with_checksums(specs: Iterable[RomSpec], extra: Mapping[str, Iterable[str]]) -> tuple[RomSpec, ...]:
    """Adds user-configured checksums (other dumps/revisions) to the accepted sets."""
    out: list[RomSpec] = []
    for spec in specs:
        added = {c.strip().lower() for c in extra.get(spec.canonical_name, ()) if c.strip()}
        if added:
            spec = RomSpec(
                canonical_name=spec.canonical_name,
                filenames=spec.filenames,
                size=spec.size,
                checksums=spec.checksums | added,
            )
        out.append(spec)
    return tuple(out)
