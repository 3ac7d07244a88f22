"""
app/repositories package marker.
"""

from app.repositories.health_record_repository import HealthRecordRepository

__all__ = [
    "HealthRecordRepository",
]
