# vdfd/services/export.py
from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Sequence

from fpdf import FPDF

from ..domain.filters import LeadFilter, filter_leads
from ..domain.distress import distress_band
from ..domain.leads import priority_label, status_label
from ..domain.types import Lead
from ..schemas import LeadOut, lead_document

CSV_HEADERS = [
    "Address",
    "Lat",
    "Lng",
    "Priority",
    "Distress Score",
    "Property Type",
    "Estimated Value",
    "Notes",
    "Date Tagged",
    "Status",
]

_MEDIA_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
    "pdf": "application/pdf",
}


@dataclass(frozen=True)
class ExportOptions:
    format: str = "csv"  # csv|json|pdf
    include_notes: bool = True
    include_screenshots: bool = True
    filters: LeadFilter | None = None
    pdf_max_leads: int = 20


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    media_type: str
    content: bytes


def _stamp(now: datetime) -> str:
    return now.strftime("%Y%m%d-%H%M%S")


def _fmt_number(v: float | None) -> str:
    if v is None:
        return ""
    # 250000.0 -> "250000", 12.5 -> "12.5"
    return str(int(v)) if float(v).is_integer() else repr(float(v))


def export_csv(leads: Iterable[Lead], *, include_notes: bool = True) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for lead in leads:
        writer.writerow(
            [
                lead.address,
                repr(lead.lat),
                repr(lead.lng),
                lead.priority_rating,
                lead.distress_score,
                lead.property_type.value,
                _fmt_number(lead.estimated_value),
                lead.notes if include_notes else "",
                lead.created_at.date().isoformat(),
                lead.status.value,
            ]
        )
    return buf.getvalue()


def export_json(
    leads: Iterable[Lead],
    *,
    include_notes: bool = True,
    include_screenshots: bool = True,
) -> str:
    docs: list[dict[str, Any]] = []
    for lead in leads:
        d = lead_document(lead)
        if not include_notes:
            d["notes"] = ""
        if not include_screenshots:
            d["screenshots"] = []
        docs.append(d)
    return json.dumps(docs, indent=2, ensure_ascii=False)


def parse_json_export(text: str) -> list[Lead]:
    return [LeadOut.model_validate(d).to_domain() for d in json.loads(text)]


def _latin1(s: str) -> str:
    # core PDF fonts are latin-1 only
    return s.encode("latin-1", "replace").decode("latin-1")


def export_pdf(
    leads: Sequence[Lead],
    *,
    now: datetime,
    include_notes: bool = True,
    max_leads: int = 20,
) -> bytes:
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 20)
    pdf.cell(0, 10, "Virtual Driving for Dollars - Lead Report", new_x="LMARGIN", new_y="NEXT")

    pdf.set_font("Helvetica", "", 12)
    pdf.cell(0, 8, f"Generated: {now.date().isoformat()}", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(0, 8, f"Total Leads: {len(leads)}", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)

    for idx, lead in enumerate(leads[:max_leads], start=1):
        pdf.set_font("Helvetica", "B", 14)
        pdf.multi_cell(0, 7, _latin1(f"{idx}. {lead.address or 'Unknown address'}"), new_x="LMARGIN", new_y="NEXT")

        pdf.set_font("Helvetica", "", 10)
        pdf.cell(
            0,
            6,
            f"Priority: {priority_label(lead.priority_rating)} ({lead.priority_rating}/5) | "
            f"Distress: {lead.distress_score}/100 ({distress_band(lead.distress_score)})",
            new_x="LMARGIN",
            new_y="NEXT",
        )
        pdf.cell(
            0,
            6,
            f"Type: {lead.property_type.value} | Status: {status_label(lead.status)}",
            new_x="LMARGIN",
            new_y="NEXT",
        )
        if include_notes and lead.notes:
            pdf.multi_cell(0, 5, _latin1(lead.notes), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

    if len(leads) > max_leads:
        pdf.set_font("Helvetica", "I", 9)
        pdf.cell(0, 6, f"... {len(leads) - max_leads} more lead(s) not shown", new_x="LMARGIN", new_y="NEXT")

    return bytes(pdf.output())


def export_leads(leads: Iterable[Lead], options: ExportOptions, *, now: datetime) -> ExportArtifact:
    fmt = options.format
    if fmt not in _MEDIA_TYPES:
        raise ValueError(f"Unsupported export format: {fmt}")

    rows = filter_leads(leads, options.filters)

    if fmt == "csv":
        content = export_csv(rows, include_notes=options.include_notes).encode("utf-8")
    elif fmt == "json":
        content = export_json(
            rows,
            include_notes=options.include_notes,
            include_screenshots=options.include_screenshots,
        ).encode("utf-8")
    else:
        content = export_pdf(
            rows,
            now=now,
            include_notes=options.include_notes,
            max_leads=options.pdf_max_leads,
        )

    return ExportArtifact(
        filename=f"leads-{_stamp(now)}.{fmt}",
        media_type=_MEDIA_TYPES[fmt],
        content=content,
    )
