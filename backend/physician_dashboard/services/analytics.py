"""
Dashboard analytics - statistics, weekly trends, top diagnoses and activity feed.
All functions work on snapshots handed in by the caller and never touch the store.
"""
import calendar
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from ..core.config import Settings, settings as default_settings
from ..core.time_utils import ensure_utc, local_day, utcnow
from ..models.examination import Examination
from ..models.file import FileCategory, FileRecord
from ..models.patient import Patient, PatientStatus
from .coordinator import ViewId


@dataclass
class DashboardStatistics:
    total_patients: int
    today_examinations: int
    total_files: int
    active_patients: int


@dataclass
class Activity:
    examination_id: int
    patient_id: int
    patient_name: str
    date: datetime
    type: str
    diagnosis: str
    chief_complaint: str


@dataclass
class TrendWindow:
    this_week: int
    last_week: int
    trend_pct: float  # 0 when last_week is 0


@dataclass
class Trends:
    examinations: TrendWindow
    new_patients: TrendWindow


@dataclass
class DiagnosisCount:
    diagnosis: str
    count: int
    percentage: int


@dataclass
class FileStatistics:
    total_files: int
    total_size: int
    categories: Dict[str, int]
    average_file_size: float


@dataclass
class DashboardAlert:
    type: str  # "warning", "info"
    title: str
    message: str
    target_view: str


@dataclass
class DashboardOverview:
    statistics: DashboardStatistics
    trends: Trends
    recent_activity: List[Activity]
    top_diagnoses: List[DiagnosisCount]
    alerts: List[DashboardAlert] = field(default_factory=list)
    generated_at: datetime = field(default_factory=utcnow)


def title_case(text: str) -> str:
    return re.sub(r"\w\S*", lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _months_before(moment: datetime, months: int) -> datetime:
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _percent_change(current: int, previous: int) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


class AggregationEngine:
    """
    Computes the numbers behind the dashboard panels.
    ``now`` can be injected everywhere so results are reproducible.
    """

    UNKNOWN_PATIENT = "Unknown Patient"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def statistics(
        self,
        patients: Sequence[Patient],
        examinations: Sequence[Examination],
        files: Sequence[FileRecord],
        now: Optional[datetime] = None,
    ) -> DashboardStatistics:
        today = local_day(now or utcnow())
        return DashboardStatistics(
            total_patients=len(patients),
            today_examinations=sum(1 for e in examinations if local_day(e.date) == today),
            total_files=len(files),
            active_patients=sum(1 for p in patients if p.status == PatientStatus.ACTIVE),
        )

    def recent_activity(
        self,
        examinations: Sequence[Examination],
        patients: Sequence[Patient],
        limit: Optional[int] = None,
    ) -> List[Activity]:
        """Newest examinations first, joined with the patient's name.

        Dangling patient references get a placeholder name instead of failing.
        """
        limit = self.settings.MAX_RECENT_ACTIVITY if limit is None else limit
        names = {p.id: p.display_name for p in patients}
        newest = sorted(examinations, key=lambda e: e.date, reverse=True)[:max(limit, 0)]
        return [
            Activity(
                examination_id=exam.id,
                patient_id=exam.patient_id,
                patient_name=names.get(exam.patient_id, self.UNKNOWN_PATIENT),
                date=exam.date,
                type=exam.type,
                diagnosis=exam.diagnosis,
                chief_complaint=exam.chief_complaint,
            )
            for exam in newest
        ]

    def trends(
        self,
        examinations: Sequence[Examination],
        patients: Sequence[Patient],
        now: Optional[datetime] = None,
    ) -> Trends:
        """Trailing window vs. the window before it, for examinations and new patients."""
        now = ensure_utc(now or utcnow())
        window = timedelta(days=self.settings.TREND_WINDOW_DAYS)
        one_window_ago = now - window
        two_windows_ago = now - 2 * window

        def split(stamps: List[datetime]) -> TrendWindow:
            this_week = sum(1 for s in stamps if s >= one_window_ago)
            last_week = sum(1 for s in stamps if two_windows_ago <= s < one_window_ago)
            return TrendWindow(this_week, last_week, _percent_change(this_week, last_week))

        return Trends(
            examinations=split([e.date for e in examinations]),
            new_patients=split([p.date_added for p in patients if p.date_added is not None]),
        )

    def top_diagnoses(self, examinations: Sequence[Examination], top_n: Optional[int] = None) -> List[DiagnosisCount]:
        top_n = self.settings.TOP_DIAGNOSES_LIMIT if top_n is None else top_n
        counts = Counter(
            e.diagnosis.strip().lower() for e in examinations if e.diagnosis and e.diagnosis.strip()
        )
        total = sum(counts.values())
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:max(top_n, 0)]
        return [
            DiagnosisCount(
                diagnosis=title_case(diagnosis),
                count=count,
                percentage=_round_half_up(count / total * 100) if total else 0,
            )
            for diagnosis, count in ranked
        ]

    def file_statistics(self, files: Sequence[FileRecord], patient_id: Optional[int] = None) -> FileStatistics:
        if patient_id is not None:
            files = [f for f in files if f.patient_id == patient_id]
        total_size = sum(f.size or 0 for f in files)
        categories = Counter(f.category or FileCategory.GENERAL for f in files)
        return FileStatistics(
            total_files=len(files),
            total_size=total_size,
            categories=dict(categories),
            average_file_size=total_size / len(files) if files else 0.0,
        )

    def dashboard_alerts(
        self,
        patients: Sequence[Patient],
        examinations: Sequence[Examination],
        now: Optional[datetime] = None,
    ) -> List[DashboardAlert]:
        now = ensure_utc(now or utcnow())
        alerts: List[DashboardAlert] = []

        cutoff = _months_before(now, self.settings.FOLLOW_UP_MONTHS)
        overdue = [p for p in patients if p.last_visit is None or p.last_visit < cutoff]
        if overdue:
            alerts.append(DashboardAlert(
                type="warning",
                title="Patients Need Follow-up",
                message=(
                    f"{len(overdue)} patients haven't visited in "
                    f"{self.settings.FOLLOW_UP_MONTHS}+ months"
                ),
                target_view=ViewId.PATIENTS,
            ))

        week_ago = now - timedelta(days=self.settings.TREND_WINDOW_DAYS)
        missing_vitals = [e for e in examinations if e.date >= week_ago and not e.has_vitals]
        if missing_vitals:
            alerts.append(DashboardAlert(
                type="info",
                title="Missing Vital Signs",
                message=f"{len(missing_vitals)} recent examinations are missing vital signs",
                target_view=ViewId.EXAMINATIONS,
            ))

        return alerts

    def overview(
        self,
        patients: Sequence[Patient],
        examinations: Sequence[Examination],
        files: Sequence[FileRecord],
        now: Optional[datetime] = None,
    ) -> DashboardOverview:
        now = ensure_utc(now or utcnow())
        return DashboardOverview(
            statistics=self.statistics(patients, examinations, files, now=now),
            trends=self.trends(examinations, patients, now=now),
            recent_activity=self.recent_activity(examinations, patients, limit=10),
            top_diagnoses=self.top_diagnoses(examinations),
            alerts=self.dashboard_alerts(patients, examinations, now=now),
            generated_at=now,
        )


aggregation_engine = AggregationEngine()
