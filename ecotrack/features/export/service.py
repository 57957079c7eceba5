"""Export service: CSV/JSON record exports and a Markdown footprint report."""

import csv
import io
import json
import logging
from datetime import datetime, timezone
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from ecotrack.features.footprint.scoring import impact_equivalents
from ecotrack.features.footprint.service import FootprintService, summarize
from ecotrack.features.insights.models import Insight
from ecotrack.features.insights.service import InsightService
from ecotrack.features.profiles.service import Profile, ProfileService
from ecotrack.models.footprint import CarbonRecord

logger = logging.getLogger(__name__)

CSV_HEADERS = ["Date", "Carbon Emission (kg CO₂)", "User ID"]
REPORT_INSIGHT_COUNT = 3


class ExportResponse(BaseModel):
    """Export response model."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    format: str
    filename: str
    content_type: str
    content: str


def records_to_csv(records: Sequence[CarbonRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow([
            record.created_at.date().isoformat(),
            f"{record.emission:.2f}",
            record.user_id,
        ])
    return buffer.getvalue()


def records_to_json(records: Sequence[CarbonRecord]) -> str:
    return json.dumps(
        [
            {
                "id": r.id,
                "user_id": r.user_id,
                "date": r.created_at.isoformat(),
                "emission": r.emission,
            }
            for r in records
        ],
        indent=2,
    )


def render_report(
    profile: Profile,
    records: Sequence[CarbonRecord],
    insights: Sequence[Insight],
    generated_at: datetime,
) -> str:
    """
    Markdown footprint report.

    Environmental impact is projected from the average daily emission.
    """
    summary = summarize(profile.id, list(records))
    lines = [
        "# Carbon Footprint Report",
        "",
        f"*Generated for: {profile.username}*",
        f"*Email: {profile.email or 'n/a'}*",
        f"*City: {profile.city or 'n/a'}*",
        f"*Report Date: {generated_at.strftime('%Y-%m-%d')}*",
        "",
        "## Summary Statistics",
        "",
        f"- Total Records: {summary.record_count}",
        f"- Average Daily Emission: {summary.average_emission:.2f} kg CO₂",
        f"- Lowest Daily Emission: {(summary.min_emission or 0.0):.2f} kg CO₂",
        f"- Highest Daily Emission: {(summary.max_emission or 0.0):.2f} kg CO₂",
        f"- Total Emissions: {summary.total_emission:.2f} kg CO₂",
    ]

    if summary.record_count:
        impact = impact_equivalents(summary.average_emission)
        lines += [
            "",
            "## Environmental Impact",
            "",
            f"- Trees needed to offset annual emissions: {impact.trees_to_offset_per_year} trees",
            f"- Equivalent driving distance: {impact.driving_km_per_year:.0f} km/year",
            f"- Energy equivalent: {impact.energy_kwh_per_year:.0f} kWh/year",
        ]

    if insights:
        lines += ["", "## Recent Insights", ""]
        for index, insight in enumerate(insights[:REPORT_INSIGHT_COUNT], start=1):
            lines.append(f"{index}. **{insight.title}**")
            lines.append(f"   {insight.content}")

    return "\n".join(lines) + "\n"


class ExportService:
    """Service for exporting a user's footprint data."""

    def __init__(self, footprints: FootprintService, insights: InsightService, profiles: ProfileService):
        self._footprints = footprints
        self._insights = insights
        self._profiles = profiles

    def export_records(self, user_id: str, export_format: Literal["csv", "json"]) -> ExportResponse:
        records = self._footprints.records_for(user_id)
        if export_format == "csv":
            content = records_to_csv(records)
            filename = "carbon-footprint-data.csv"
            content_type = "text/csv; charset=utf-8"
        else:  # json
            content = records_to_json(records)
            filename = "carbon-footprint-data.json"
            content_type = "application/json"

        logger.info(f"[export] {export_format} export for {user_id}: {len(records)} records")
        return ExportResponse(
            user_id=user_id,
            format=export_format,
            filename=filename,
            content_type=content_type,
            content=content,
        )

    def report(self, user_id: str, now: Optional[datetime] = None) -> ExportResponse:
        profile = self._profiles.current_profile(user_id)
        records = self._footprints.records_for(user_id)
        # Most recent insights first
        insights: List[Insight] = list(reversed(self._insights.list_insights(user_id)))
        content = render_report(profile, records, insights, now or datetime.now(timezone.utc))
        return ExportResponse(
            user_id=user_id,
            format="markdown",
            filename="carbon-footprint-report.md",
            content_type="text/markdown",
            content=content,
        )
