"""
JSON manifest of rewritten modules.

The manifest lists every method the rewriter guarded, so a build can show
which invariants are enforced where without re-parsing the output.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from .logging import get_logger
from .rewrite import RewriteResult, TransformationRecord

logger = get_logger(__name__)

MANIFEST_VERSION = "1.0"


@dataclass(frozen=True)
class Manifest:
    """Transformations applied to one source module."""
    version: str                            # Manifest format version
    source: str                             # Source module path
    generated_at: str                       # When the rewrite was performed
    total_methods: int                      # Number of guarded methods
    summary: Dict[str, int]                 # Methods per timing keyword
    methods: List[TransformationRecord]     # One entry per guarded method

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "source": self.source,
            "generated_at": self.generated_at,
            "total_methods": self.total_methods,
            "summary": self.summary,
            "methods": [record.to_dict() for record in self.methods],
        }


def build_manifest(source_path: Path, result: RewriteResult) -> Manifest:
    summary: Dict[str, int] = {}
    for record in result.records:
        summary[record.timing] = summary.get(record.timing, 0) + 1

    return Manifest(
        version=MANIFEST_VERSION,
        source=str(source_path),
        generated_at=datetime.now().isoformat(timespec="seconds"),
        total_methods=len(result.records),
        summary=summary,
        methods=list(result.records),
    )


def write_manifest_json(manifest: Manifest, manifest_path: Path) -> Path:
    """
    Write manifest to a JSON file.

    Args:
        manifest: Manifest to write
        manifest_path: Destination file, parent directories are created

    Returns:
        Path to the written manifest file
    """
    try:
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
        with open(manifest_path, 'w', encoding='utf-8') as f:
            json.dump(manifest.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Wrote manifest with {manifest.total_methods} methods to {manifest_path}")
        return manifest_path

    except Exception as exc:
        logger.error(f"Failed to write manifest to {manifest_path}: {exc}")
        raise


def load_manifest_json(manifest_path: Path) -> Manifest:
    """Load a manifest written by ``write_manifest_json``."""
    with open(manifest_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    return Manifest(
        version=data["version"],
        source=data["source"],
        generated_at=data["generated_at"],
        total_methods=data["total_methods"],
        summary=data["summary"],
        methods=[TransformationRecord(**item) for item in data.get("methods", [])],
    )
