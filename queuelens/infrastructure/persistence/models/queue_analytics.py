"""
QueueLens – Queue Analytics Snapshot ORM Model
================================================
Modelo para la tabla `queue_analytics` (historial de snapshots).

DECISIONES DE DISEÑO:

- Un snapshot es inmutable: se inserta y nunca se actualiza.
- Columnas planas para conteos/tasas (consultables desde SQL).
- Los filtros con los que se calculó se guardan en columnas propias
  para poder filtrar el historial por igualdad.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from queuelens.infrastructure.persistence.database import Base


class QueueAnalyticsSnapshotModel(Base):
    """Snapshot persistido de QueueAnalyticsEntity."""

    __tablename__ = "queue_analytics"

    # ─── Primary Key ──────────────────────────────────────────────────
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    shop_id: Mapped[str] = mapped_column(String(36), nullable=False)

    # ─── Ventana ──────────────────────────────────────────────────────
    date_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    date_to: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # ─── Filtros usados ───────────────────────────────────────────────
    employee_id: Mapped[str | None] = mapped_column(String(36), default=None)
    service_id: Mapped[str | None] = mapped_column(String(36), default=None)
    status_filter: Mapped[str | None] = mapped_column(String(20), default=None)
    department_id: Mapped[str | None] = mapped_column(String(36), default=None)

    # ─── Contadores ───────────────────────────────────────────────────
    total_queues: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_queues: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cancelled_queues: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    no_show_queues: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    in_progress_queues: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    waiting_queues: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # ─── Ratios (%) y tiempos (min) ───────────────────────────────────
    completion_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    cancellation_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    no_show_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    average_wait_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    average_service_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_queue_analytics_shop_created", "shop_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<QueueAnalyticsSnapshot(id='{self.id}', shop_id='{self.shop_id}', "
            f"total={self.total_queues})>"
        )
