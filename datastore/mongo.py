from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

from datastore.base import FIND_LIMIT, StoreError
from models.records import Measurement, MeasurementField, TimeRange, ensure_utc
from services.aggregator import MetricsSummary
from settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "analytics"


class MongoMeasurementStore:
    """Measurement collection backed by a MongoDB deployment."""

    backend = "mongo"

    def __init__(
        self,
        client: MongoClient,
        collection_name: str = "measurements",
        database_name: Optional[str] = None,
    ) -> None:
        self.client = client
        if database_name:
            database = client[database_name]
        else:
            database = client.get_default_database(default=DEFAULT_DATABASE)
        self.collection = database[collection_name]

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoMeasurementStore":
        client: MongoClient = MongoClient(
            settings.mongo_uri,
            tz_aware=True,
            serverSelectionTimeoutMS=settings.mongo_timeout_ms,
        )
        return cls(client=client, collection_name=settings.collection_name)

    def ensure_indexes(self) -> None:
        try:
            self.collection.create_index([("timestamp", ASCENDING)])
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

    def count(self) -> int:
        try:
            return self.collection.count_documents({})
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

    def insert_many(self, records: Sequence[Measurement]) -> int:
        if not records:
            return 0
        documents = [record.to_document() for record in records]
        try:
            result = self.collection.insert_many(documents)
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc
        return len(result.inserted_ids)

    def find(
        self, field: MeasurementField, time_range: Optional[TimeRange] = None
    ) -> List[Dict[str, Any]]:
        query = time_range.to_filter() if time_range else {}
        projection = {"_id": False, "timestamp": True, field.value: True}
        try:
            cursor = (
                self.collection.find(query, projection)
                .sort("timestamp", ASCENDING)
                .limit(FIND_LIMIT)
            )
            documents = list(cursor)
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

        return [
            {
                "timestamp": ensure_utc(document["timestamp"]),
                field.value: document.get(field.value),
            }
            for document in documents
        ]

    def aggregate(
        self, field: MeasurementField, time_range: Optional[TimeRange] = None
    ) -> MetricsSummary:
        source = f"${field.value}"
        pipeline = [
            {"$match": time_range.to_filter() if time_range else {}},
            {
                "$group": {
                    "_id": None,
                    "avg": {"$avg": source},
                    "min": {"$min": source},
                    "max": {"$max": source},
                    "stdDev": {"$stdDevPop": source},
                    "count": {"$sum": 1},
                }
            },
        ]
        try:
            results = list(self.collection.aggregate(pipeline))
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

        if not results:
            return MetricsSummary()
        group = results[0]
        return MetricsSummary(
            avg=group.get("avg") or 0.0,
            min=group.get("min") or 0.0,
            max=group.get("max") or 0.0,
            std_dev=group.get("stdDev") or 0.0,
            count=group.get("count") or 0,
        )

    def is_connected(self) -> bool:
        """Ping the deployment; never answers from a cached state."""
        try:
            self.client.admin.command("ping")
        except PyMongoError as exc:
            logger.debug("MongoDB ping failed", extra={"error": str(exc)})
            return False
        return True

    def close(self) -> None:
        self.client.close()
