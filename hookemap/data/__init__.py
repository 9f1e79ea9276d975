"""Reading similarity data into an embedding."""

from .ingest import (
    SimilarityRecord,
    parse_record,
    iter_records,
    read_similarities,
    load_embedding,
)

__all__ = [
    "SimilarityRecord",
    "parse_record",
    "iter_records",
    "read_similarities",
    "load_embedding",
]
