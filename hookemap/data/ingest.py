"""
Similarity Record Ingestion

Reads whitespace-delimited similarity records, one per line:

    wind    breeze   0.82
    wind    gale     0.64

Blank lines and lines starting with ``#`` are ignored. A line that does not
hold two labels and a number is logged and skipped; the remaining lines are
still read.
"""

import logging
import math
import random
from pathlib import Path
from typing import Iterable, Iterator, NamedTuple, Optional, TextIO, Union

from ..config import EmbeddingConfig
from ..errors import IngestionError, MalformedRecordError
from ..model.embedding import Embedding

logger = logging.getLogger(__name__)


class SimilarityRecord(NamedTuple):
    """One measured similarity between two labelled entities."""
    label_a: str
    label_b: str
    similarity: float


def parse_record(line: str, line_number: int = 0) -> SimilarityRecord:
    """
    Parse ``label label similarity``.

    Raises:
        MalformedRecordError: If fields are missing or the similarity is not
            a finite number
    """
    parts = line.split()
    if len(parts) < 3:
        raise MalformedRecordError(line, f"expected 3 fields, found {len(parts)}", line_number)
    if len(parts) > 3:
        raise MalformedRecordError(line, f"unexpected extra fields ({len(parts)})", line_number)

    try:
        similarity = float(parts[2])
    except ValueError:
        raise MalformedRecordError(
            line, f"similarity is not a number: {parts[2]!r}", line_number
        ) from None
    if not math.isfinite(similarity):
        raise MalformedRecordError(line, "similarity is not finite", line_number)

    return SimilarityRecord(parts[0], parts[1], similarity)


def iter_records(lines: Iterable[str]) -> Iterator[SimilarityRecord]:
    """Yield the well-formed records of ``lines``, skipping the rest."""
    skipped = 0
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            yield parse_record(stripped, number)
        except MalformedRecordError as e:
            skipped += 1
            logger.warning("Skipping malformed record: %s", e)
    if skipped:
        logger.info("Skipped %d malformed records", skipped)


def read_similarities(source: Union[str, Path, TextIO]) -> Iterator[SimilarityRecord]:
    """
    Yield records from a file path or an open text stream.

    Raises:
        IngestionError: If the file cannot be opened, read or decoded as UTF-8
    """
    if hasattr(source, "read"):
        name = getattr(source, "name", "<stream>")
        try:
            yield from iter_records(source)  # type: ignore[arg-type]
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Unable to read similarity data %s: %s", name, e)
            raise IngestionError(f"Unable to read similarity data {name}: {e}") from e
        return

    path = Path(source)
    try:
        with open(path, "r", encoding="utf-8") as f:
            yield from iter_records(f)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Unable to read similarity data %s: %s", path, e)
        raise IngestionError(f"Unable to read similarity data {path}: {e}") from e


def load_embedding(
    source: Union[str, Path, TextIO],
    reference: str,
    config: Optional[EmbeddingConfig] = None,
    rng: Optional[random.Random] = None,
) -> Embedding:
    """
    Read similarity data and build an embedding around ``reference``.

    Raises:
        IngestionError: If the source cannot be read
        MissingEntityError: If the reference is not in the data or there are
            too few other entities to orient the layout
    """
    logger.info("Loading similarity data from %s", getattr(source, "name", source))
    return Embedding.from_records(read_similarities(source), reference, config, rng)
