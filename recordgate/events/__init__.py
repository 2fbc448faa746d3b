"""
Cloud event normalization: record adapters, classification, enrichment
and the event pipeline.
"""

from .classifier import RecordClassifier
from .enricher import RecordEnricher
from .pipeline import EventPipeline
from .store import ObjectStore, S3ObjectStore

__all__ = [
    "EventPipeline",
    "RecordClassifier",
    "RecordEnricher",
    "ObjectStore",
    "S3ObjectStore",
]
