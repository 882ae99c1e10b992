"""
QueueLens – Application Service: Analytics Exporter
=====================================================
Serializa los agregados de una ventana a un documento descargable.

FORMATOS:
  json → documento indentado {shop_id, date_range, generated_at,
         overall, time, peak_hours, service_analytics}
  csv  → filas section,metric,value (una por métrica escalar)
  pdf  → no soportado (VALIDATION_ERROR)

Horas pico y servicios pueden ser None (ventana sin registros):
en json quedan null y en csv no generan filas.
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from queuelens.application.dto.analytics_dto import present
from queuelens.domain.entities.queue_analytics import (
    QueueAnalyticsEntity,
    QueuePeakHoursEntity,
    QueueServiceAnalyticsEntity,
    QueueTimeAnalyticsEntity,
)
from queuelens.domain.exceptions.domain_errors import AnalyticsValidationError

SUPPORTED_FORMATS = ("json", "csv")
CSV_HEADER = ("section", "metric", "value")

_MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
}

# Campos de metadatos que no se exportan como métricas
_META_FIELDS = {"shop_id", "date_range", "created_at", "updated_at"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AnalyticsExportBundle:
    """Agregados de una misma ventana listos para exportar."""

    overall: QueueAnalyticsEntity
    time: QueueTimeAnalyticsEntity
    peak_hours: Optional[QueuePeakHoursEntity] = None
    service_analytics: Optional[QueueServiceAnalyticsEntity] = None


@dataclass
class ExportResult:
    content: str
    media_type: str
    filename: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "content": self.content,
            "media_type": self.media_type,
            "filename": self.filename,
        }


class AnalyticsExporter:
    """Exportador json/csv de agregados."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utcnow

    def export(self, bundle: AnalyticsExportBundle, export_format: str) -> ExportResult:
        fmt = (export_format or "").strip().lower()
        if fmt not in SUPPORTED_FORMATS:
            raise AnalyticsValidationError(
                f"Formato de exportación no soportado: {export_format!r}",
                operation="export_analytics_data",
                context={"format": export_format, "supported": list(SUPPORTED_FORMATS)},
            )

        content = self._to_json(bundle) if fmt == "json" else self._to_csv(bundle)
        return ExportResult(
            content=content,
            media_type=_MEDIA_TYPES[fmt],
            filename=self._filename(bundle, fmt),
        )

    # ═══════════════════════════════════════════════════════════════
    #  JSON
    # ═══════════════════════════════════════════════════════════════

    def _to_json(self, bundle: AnalyticsExportBundle) -> str:
        document = {
            "shop_id": bundle.overall.shop_id,
            "date_range": bundle.overall.date_range.to_dict(),
            "generated_at": self._clock().isoformat(),
            "overall": present(bundle.overall),
            "time": present(bundle.time),
            "peak_hours": present(bundle.peak_hours) if bundle.peak_hours else None,
            "service_analytics": (
                present(bundle.service_analytics) if bundle.service_analytics else None
            ),
        }
        return json.dumps(document, indent=2, ensure_ascii=False)

    # ═══════════════════════════════════════════════════════════════
    #  CSV
    # ═══════════════════════════════════════════════════════════════

    def _to_csv(self, bundle: AnalyticsExportBundle) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for row in self.csv_rows(bundle):
            writer.writerow(row)
        return buffer.getvalue()

    @staticmethod
    def csv_rows(bundle: AnalyticsExportBundle) -> List[Tuple[str, str, Any]]:
        """Filas (section, metric, value) del bundle."""
        rows: List[Tuple[str, str, Any]] = []
        rows.extend(_scalar_rows("overall", present(bundle.overall)))
        rows.extend(_scalar_rows("time", present(bundle.time)))

        if bundle.peak_hours:
            for item in present(bundle.peak_hours)["recommended_staffing"]:
                rows.append(("staffing", f"hour_{item['hour']:02d}", item["recommended_employees"]))
            for item in bundle.peak_hours.peak_hours:
                rows.append(("peak_hours", f"hour_{item.hour:02d}", item.queue_count))

        if bundle.service_analytics:
            for stat in present(bundle.service_analytics)["service_stats"]:
                section = f"service:{stat['service_id']}"
                for metric in ("total_queues", "completed_queues", "revenue", "popularity_score"):
                    rows.append((section, metric, stat[metric]))

        return rows

    # ═══════════════════════════════════════════════════════════════
    #  HELPERS
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def _filename(bundle: AnalyticsExportBundle, fmt: str) -> str:
        date_range = bundle.overall.date_range
        return (
            f"queue_analytics_{bundle.overall.shop_id}_"
            f"{date_range.date_from:%Y%m%d}_{date_range.date_to:%Y%m%d}.{fmt}"
        )


def _scalar_rows(section: str, data: Dict[str, Any]) -> Iterator[Tuple[str, str, Any]]:
    for metric, value in data.items():
        if metric in _META_FIELDS or isinstance(value, (dict, list)):
            continue
        yield section, metric, value
