"""
Persisted Layouts

Two formats:

- Positions (TSV): one ``label<TAB>coord0<TAB>coord1`` line per entity, for
  spreadsheets and plotting tools.
- Snapshot (YAML): every coordinate plus the run parameters. A snapshot can
  seed a later run instead of the random-restart search.

```yaml
version: 1
created: 2026-01-14T10:30:00
reference: wind
dimensions: 2
distortion: 0.4132
config: {...}
entities:
  wind: [0.0, 0.0]
  breeze: [0.412, 0.0]
```
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..errors import IngestionError
from ..model.embedding import Embedding

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def save_positions(embedding: Embedding, path: Union[str, Path]) -> Path:
    """Write every entity as a tab-separated line of its label and coordinates."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        for entity in embedding:
            coords = "\t".join(repr(c) for c in entity.before_position)
            f.write(f"{entity.label}\t{coords}\n")
    logger.info("Saved %d positions to %s", len(embedding), path)
    return path


@dataclass
class LayoutSnapshot:
    """Saved coordinates of a finished layout."""
    reference: Optional[str] = None
    dimensions: int = 2
    distortion: float = 0.0
    created: Optional[datetime] = None
    version: int = SNAPSHOT_VERSION
    config: Dict[str, Any] = field(default_factory=dict)
    entities: Dict[str, List[float]] = field(default_factory=dict)

    def __post_init__(self):
        if self.created is None:
            self.created = datetime.now()

    @classmethod
    def from_embedding(cls, embedding: Embedding) -> "LayoutSnapshot":
        return cls(
            reference=embedding.reference_label,
            dimensions=embedding.config.dimensions,
            distortion=embedding.sum_error,
            config=embedding.config.to_dict(),
            entities={
                label: [round(c, 6) for c in coords]
                for label, coords in embedding.positions().items()
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "created": self.created.isoformat() if self.created else None,
            "reference": self.reference,
            "dimensions": self.dimensions,
            "distortion": round(self.distortion, 6),
            "config": self.config,
            "entities": self.entities,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutSnapshot":
        created = data.get("created")
        if isinstance(created, str):
            created = datetime.fromisoformat(created)
        return cls(
            reference=data.get("reference"),
            dimensions=int(data.get("dimensions", 2)),
            distortion=float(data.get("distortion", 0.0)),
            created=created,
            version=int(data.get("version", SNAPSHOT_VERSION)),
            config=dict(data.get("config") or {}),
            entities={
                str(label): [float(c) for c in coords]
                for label, coords in (data.get("entities") or {}).items()
            },
        )


def save_snapshot(embedding: Embedding, path: Union[str, Path]) -> LayoutSnapshot:
    """Write a YAML snapshot of ``embedding``."""
    path = Path(path)
    snapshot = LayoutSnapshot.from_embedding(embedding)
    content = yaml.dump(
        snapshot.to_dict(),
        default_flow_style=None,
        sort_keys=False,
        allow_unicode=True,
    )
    path.write_text(content, encoding="utf-8")
    logger.info("Saved snapshot: %s (%d entities)", path, len(snapshot.entities))
    return snapshot


def load_snapshot(path: Union[str, Path]) -> LayoutSnapshot:
    """
    Read a YAML snapshot.

    Raises:
        IngestionError: If the file cannot be read or is not a snapshot
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise IngestionError(f"Failed to read snapshot {path}: {e}") from e

    if not isinstance(data, dict) or "entities" not in data:
        raise IngestionError(f"Not a layout snapshot: {path}")

    snapshot = LayoutSnapshot.from_dict(data)
    if snapshot.version > SNAPSHOT_VERSION:
        logger.warning(
            "Snapshot %s has version %d, newer than supported %d",
            path, snapshot.version, SNAPSHOT_VERSION,
        )
    logger.debug("Loaded snapshot %s with %d entities", path, len(snapshot.entities))
    return snapshot
