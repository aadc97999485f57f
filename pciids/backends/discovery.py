from __future__ import annotations
from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Sequence
from importlib import resources
from ..table import PciIdTable, load_table
from ..data import text_resource, bundled_text_available

log = logging.getLogger(__name__)

SYSTEM_PCI_IDS = ("/usr/share/hwdata/pci.ids", "/usr/share/misc/pci.ids")


@dataclass(frozen=True)
class Candidate:
    """Represents a potential database source in the discovery order."""

    kind: str  # "path", "env", "system", "bundled"
    ref: str  # path or resource name for debugging
    opener: Callable[[], PciIdTable]  # returns a built table, or raises OSError


def _resolve_candidates(
    *,
    explicit_path: Optional[str],
    env_path: Optional[str],
    system_paths: Sequence[str],
    allow_bundled: bool,
    allow_system: bool,
) -> List[Candidate]:
    """
    Build an ordered list of candidates. Pure function -> easy to unit test:
    - Pass in env values and desired system paths
    - allow_bundled gates whether the bundled pci.ids is considered
    """
    cands: List[Candidate] = []

    # Explicit path (single-candidate short path)
    if explicit_path:
        p = str(explicit_path)
        cands.append(Candidate("path", p, lambda: load_table(p)))
        return cands

    if env_path:

        def open_env(p: str = env_path) -> PciIdTable:
            if not Path(p).is_file():
                raise FileNotFoundError(f"PCIIDS_PATH not found: {p}")
            return load_table(p)

        cands.append(Candidate("env", env_path, open_env))

    if allow_system:
        for sp in system_paths:
            cands.append(Candidate("system", sp, lambda p=sp: load_table(p)))

    def open_bundled() -> PciIdTable:
        # the table is fully read during the build, so the file need not outlive it
        with resources.as_file(text_resource()) as p:
            return load_table(str(p))

    if allow_bundled and bundled_text_available():
        cands.append(Candidate("bundled", "<pkg>/pci.ids", open_bundled))

    return cands


# -------- public entry --------


def discover_table(path: Optional[str]) -> PciIdTable:
    """
    Build a table from the first readable source. Sources that cannot be
    opened are skipped; a malformed database is fatal and propagates.
    """
    allow_bundled = os.getenv("PCIIDS_NO_BUNDLED") != "1"
    allow_system = os.getenv("PCIIDS_NO_SYSTEM") != "1"
    cands = _resolve_candidates(
        explicit_path=path,
        env_path=os.getenv("PCIIDS_PATH"),
        system_paths=SYSTEM_PCI_IDS,
        allow_bundled=allow_bundled,
        allow_system=allow_system,
    )

    last_err: Optional[Exception] = None
    for c in cands:
        try:
            table = c.opener()
        except OSError as e:
            log.debug("skipping %s candidate %s: %s", c.kind, c.ref, e)
            last_err = e
            continue
        log.debug("using %s candidate %s", c.kind, c.ref)
        return table

    raise FileNotFoundError(
        "No PCI ID database found. "
        "Set PCIIDS_PATH, install hwdata, or allow bundled resources."
    ) from last_err
