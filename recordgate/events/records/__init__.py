"""
Record adapters for each supported event source.
"""

from .base import BaseRecord, UnrecognizedRecord
from .dynamodb import DynamoDBRecord, unmarshall
from .s3 import S3Record
from .sqs import SQSRecord

__all__ = [
    "BaseRecord",
    "UnrecognizedRecord",
    "DynamoDBRecord",
    "S3Record",
    "SQSRecord",
    "unmarshall",
]
