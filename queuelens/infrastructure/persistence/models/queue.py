"""
QueueLens – Queue ORM Model
=============================
Modelo (solo lectura) de la tabla `queues`, dueña del sistema CRUD.

DECISIONES DE DISEÑO:

- El motor de analytics nunca escribe esta tabla: solo la consulta
  por tienda + rango de created_at + filtros de igualdad.
- ENUM para status: waiting, in_progress, completed, cancelled, no_show.
- actual_wait_time en minutos (NULL si no se midió).
- total_amount DECIMAL(12,2) (moneda).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum as SQLEnum, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from queuelens.domain.entities.queue_record import QueueStatus
from queuelens.infrastructure.persistence.database import Base


class QueueModel(Base):
    """Registro crudo de un cliente en la cola de una tienda."""

    __tablename__ = "queues"

    # ─── Primary Key ──────────────────────────────────────────────────
    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # ─── Scope ────────────────────────────────────────────────────────
    shop_id: Mapped[str] = mapped_column(String(36), nullable=False)
    service_id: Mapped[str | None] = mapped_column(String(36), default=None)
    service_name: Mapped[str | None] = mapped_column(String(255), default=None)
    employee_id: Mapped[str | None] = mapped_column(String(36), default=None)
    department_id: Mapped[str | None] = mapped_column(String(36), default=None)

    # ─── Status & Result ──────────────────────────────────────────────
    status: Mapped[str] = mapped_column(
        SQLEnum(*[s.value for s in QueueStatus], name="queue_status_enum"),
        nullable=False, default=QueueStatus.WAITING.value,
    )
    actual_wait_time: Mapped[int | None] = mapped_column(
        Integer, default=None,
        comment="Minutos de espera reales",
    )
    total_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), default=None,
    )

    # ─── Timing ───────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    # ─── Table Args (índices compuestos) ──────────────────────────────
    __table_args__ = (
        Index("idx_queues_shop_created", "shop_id", "created_at"),
        Index("idx_queues_shop_status", "shop_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Queue(id='{self.id}', shop_id='{self.shop_id}', status={self.status})>"
