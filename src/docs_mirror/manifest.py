from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any

EVENTS_FILE = "manifest.jsonl"
SUMMARY_FILE = "manifest.json"


def utc_iso(ts: float | None = None) -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(ts))


class ManifestWriter:
    """Run log kept next to the mirrored pages.

    Each page outcome is appended to ``manifest.jsonl`` as soon as it is known,
    so an interrupted crawl still leaves a usable record. ``manifest.json`` is
    written once, at the end of the run.
    """

    def __init__(self, out_dir: Path) -> None:
        self.out_dir = Path(out_dir)
        self.jsonl_path = self.out_dir / EVENTS_FILE
        self.json_path = self.out_dir / SUMMARY_FILE
        self.events_written = 0

    def start(self) -> None:
        """Begin a fresh event log, dropping events left by an earlier run."""
        self.out_dir.mkdir(parents=True, exist_ok=True)
        self.jsonl_path.write_text("", encoding="utf-8")
        self.events_written = 0

    def record(self, kind: str, url: str, **fields: Any) -> None:
        self.append({"kind": kind, "url": url, **fields})

    def append(self, event: dict[str, Any]) -> None:
        line = json.dumps({"at": utc_iso(), **event}, ensure_ascii=False)
        self.out_dir.mkdir(parents=True, exist_ok=True)
        with self.jsonl_path.open("a", encoding="utf-8", newline="\n") as f:
            f.write(line + "\n")
        self.events_written += 1

    def write_summary(self, summary: dict[str, Any]) -> None:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        payload = {**summary, "events": self.events_written}
        self.json_path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
