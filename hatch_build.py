# hatch_build.py
from __future__ import annotations

import hashlib
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from hatchling.builders.hooks.plugin.interface import BuildHookInterface

SYSTEM_PCI_IDS = ("/usr/share/hwdata/pci.ids", "/usr/share/misc/pci.ids")


def _sha256(p: Path) -> str:
    h = hashlib.sha256()
    with p.open("rb") as f:
        for chunk in iter(lambda: f.read(1 << 20), b""):
            h.update(chunk)
    return h.hexdigest()


def _count_top_level(p: Path) -> dict:
    # Rough counts for the manifest; the real parse happens at runtime.
    vendors = classes = 0
    with p.open("r", encoding="utf-8", errors="replace") as f:
        for line in f:
            if line.startswith("C "):
                classes += 1
            elif line[:1] not in ("", "#", "\t", "\n"):
                vendors += 1
    return {"vendor_lines": vendors, "class_lines": classes}


def _find_source() -> Optional[Path]:
    explicit = os.getenv("PCIIDS_BUNDLE_SOURCE")
    if explicit:
        p = Path(explicit)
        if not p.is_file():
            raise RuntimeError(f"PCIIDS_BUNDLE_SOURCE not found: {p}")
        return p
    for candidate in SYSTEM_PCI_IDS:
        p = Path(candidate)
        if p.is_file():
            return p
    return None


class CustomBuildHook(BuildHookInterface):
    """
    During *build* (wheel/sdist):
      - write pciids/data/pci.ids from:
          1) $PCIIDS_BUNDLE_SOURCE, or
          2) /usr/share/hwdata/pci.ids or /usr/share/misc/pci.ids
      - write pciids/data/manifest.json
    Nothing is downloaded. Without a source the artifact ships no bundled
    database and runtime discovery falls back to system paths.
    """

    def _ensure_generated(self) -> list[Path]:
        root = Path(self.root).resolve()
        data_dir = root / "pciids" / "data"
        text_out = data_dir / "pci.ids"
        manifest_out = data_dir / "manifest.json"

        source = _find_source()
        if source is None:
            self.app.display_warning("no pci.ids found; building without bundled data")
            return [p for p in (text_out, manifest_out) if p.is_file()]

        text_out.write_bytes(source.read_bytes())
        manifest = {
            "generated_at_utc": datetime.now(timezone.utc).strftime(
                "%Y-%m-%dT%H:%M:%SZ"
            ),
            "source": {"method": "local", "path": str(source)},
            "text": {
                "sha256": _sha256(text_out),
                "size": text_out.stat().st_size,
                **_count_top_level(text_out),
            },
            "python": sys.version.split()[0],
            "tool": "hatch_build.py",
        }
        manifest_out.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
        return [text_out, manifest_out]

    # Run early so the files exist before file selection
    def initialize(self, version: str, build_data: dict) -> None:
        if version == "editable":
            # the source tree is imported directly; nothing to bundle
            return
        generated = self._ensure_generated()
        build_data.setdefault("force_include", {})
        for p in generated:
            rel = str(p.relative_to(Path(self.root).resolve()))
            build_data["force_include"][str(p)] = rel
