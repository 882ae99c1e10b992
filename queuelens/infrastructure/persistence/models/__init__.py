"""
Infrastructure Models Package.

Contiene los modelos ORM de SQLAlchemy para la persistencia.
Estos modelos representan la estructura de la base de datos,
NO las entidades de dominio.
"""

from queuelens.infrastructure.persistence.models.queue import QueueModel
from queuelens.infrastructure.persistence.models.queue_analytics import QueueAnalyticsSnapshotModel

__all__ = [
    "QueueModel",
    "QueueAnalyticsSnapshotModel",
]
