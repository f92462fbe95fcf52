"""Tests for dashboard statistics, trends, top diagnoses and the activity feed."""
from datetime import date, datetime, timedelta, timezone

import pytest

from physician_dashboard.models.examination import Examination
from physician_dashboard.models.file import FileRecord
from physician_dashboard.models.patient import Patient
from physician_dashboard.services.analytics import AggregationEngine, title_case
from physician_dashboard.services.coordinator import ViewId

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_patient(pid, first="Test", last="Patient", added=None, status="active", last_visit=None):
    return Patient(
        id=pid,
        first_name=first,
        last_name=last,
        date_of_birth=date(1980, 1, 1),
        gender="other",
        phone_number="555-0100",
        date_added=added or NOW - timedelta(days=400),
        status=status,
        last_visit=last_visit,
    )


def make_exam(eid, patient_id, when, diagnosis="", heart_rate=72, exam_type="routine"):
    return Examination(
        id=eid,
        patient_id=patient_id,
        date=when,
        type=exam_type,
        heart_rate=heart_rate,
        diagnosis=diagnosis,
        chief_complaint=f"complaint {eid}",
    )


def make_file(fid, patient_id, size, category):
    return FileRecord(
        id=fid,
        patient_id=patient_id,
        name=f"file{fid}.pdf",
        type="application/pdf",
        size=size,
        category=category,
        date_uploaded=NOW,
    )


@pytest.fixture()
def engine():
    return AggregationEngine()


@pytest.fixture()
def patients():
    return [
        make_patient(1, "Ana", "Diaz", added=NOW - timedelta(days=2), last_visit=NOW - timedelta(hours=1)),
        make_patient(2, "Ben", "Okafor", added=NOW - timedelta(days=10)),
        make_patient(3, "Cai", "Lin", status="inactive", last_visit=NOW - timedelta(days=30)),
    ]


@pytest.fixture()
def examinations():
    return [
        make_exam(1, 1, NOW - timedelta(hours=1), diagnosis="Hypertension"),
        make_exam(2, 2, NOW - timedelta(days=5), diagnosis="hypertension "),
        make_exam(3, 3, NOW - timedelta(days=11), diagnosis="type 2 diabetes"),
        make_exam(4, 1, NOW - timedelta(days=40)),
    ]


class TestStatistics:
    def test_counts(self, engine, patients, examinations):
        files = [make_file(1, 1, 100, "imaging")]
        stats = engine.statistics(patients, examinations, files, now=NOW)
        assert stats.total_patients == 3
        assert stats.today_examinations == 1
        assert stats.total_files == 1
        assert stats.active_patients == 2

    def test_empty_collections(self, engine):
        stats = engine.statistics([], [], [], now=NOW)
        assert (stats.total_patients, stats.today_examinations, stats.total_files, stats.active_patients) == (0, 0, 0, 0)


class TestTrends:
    def test_examination_trend(self, engine, patients, examinations):
        trends = engine.trends(examinations, patients, now=NOW)
        assert trends.examinations.this_week == 2
        assert trends.examinations.last_week == 1
        assert trends.examinations.trend_pct == pytest.approx(100.0)

    def test_new_patient_trend(self, engine, patients, examinations):
        trends = engine.trends(examinations, patients, now=NOW)
        assert trends.new_patients.this_week == 1
        assert trends.new_patients.last_week == 1
        assert trends.new_patients.trend_pct == 0.0

    def test_no_previous_week_gives_zero_trend(self, engine):
        exams = [make_exam(1, 1, NOW - timedelta(days=1))]
        trends = engine.trends(exams, [], now=NOW)
        assert trends.examinations.this_week == 1
        assert trends.examinations.last_week == 0
        assert trends.examinations.trend_pct == 0.0

    def test_decline_is_negative(self, engine):
        exams = [make_exam(i, 1, NOW - timedelta(days=9)) for i in range(4)]
        exams.append(make_exam(10, 1, NOW - timedelta(days=2)))
        trends = engine.trends(exams, [], now=NOW)
        assert trends.examinations.trend_pct == pytest.approx(-75.0)


class TestTopDiagnoses:
    def test_groups_case_and_whitespace_variants(self, engine, examinations):
        top = engine.top_diagnoses(examinations)
        assert [(d.diagnosis, d.count, d.percentage) for d in top] == [
            ("Hypertension", 2, 67),
            ("Type 2 Diabetes", 1, 33),
        ]

    def test_limit(self, engine, examinations):
        assert len(engine.top_diagnoses(examinations, top_n=1)) == 1

    def test_no_diagnoses(self, engine):
        assert engine.top_diagnoses([make_exam(1, 1, NOW)]) == []

    def test_title_case(self):
        assert title_case("acute BRONCHITIS, mild") == "Acute Bronchitis, Mild"


class TestRecentActivity:
    def test_newest_first_with_names(self, engine, patients, examinations):
        activity = engine.recent_activity(examinations, patients, limit=3)
        assert [a.examination_id for a in activity] == [1, 2, 3]
        assert activity[0].patient_name == "Ana Diaz"

    def test_missing_patient_gets_placeholder(self, engine, patients):
        activity = engine.recent_activity([make_exam(9, 404, NOW)], patients)
        assert activity[0].patient_name == "Unknown Patient"

    def test_default_limit(self, engine, patients):
        exams = [make_exam(i, 1, NOW - timedelta(minutes=i)) for i in range(1, 9)]
        assert len(engine.recent_activity(exams, patients)) == 5


class TestFileStatistics:
    def test_totals_and_categories(self, engine):
        files = [make_file(1, 1, 100, "imaging"), make_file(2, 1, 300, "imaging"), make_file(3, 2, 200, "cardiac")]
        stats = engine.file_statistics(files)
        assert stats.total_files == 3
        assert stats.total_size == 600
        assert stats.categories == {"imaging": 2, "cardiac": 1}
        assert stats.average_file_size == pytest.approx(200.0)

    def test_filtered_by_patient(self, engine):
        files = [make_file(1, 1, 100, "imaging"), make_file(2, 2, 300, "reports")]
        stats = engine.file_statistics(files, patient_id=2)
        assert stats.total_files == 1
        assert stats.categories == {"reports": 1}

    def test_no_files(self, engine):
        assert engine.file_statistics([]).average_file_size == 0.0


class TestAlerts:
    def test_follow_up_and_missing_vitals(self, engine, patients):
        exams = [make_exam(1, 1, NOW - timedelta(days=1), heart_rate=None)]
        alerts = engine.dashboard_alerts(patients, exams, now=NOW)
        assert [a.title for a in alerts] == ["Patients Need Follow-up", "Missing Vital Signs"]
        assert alerts[0].message.startswith("1 patients")
        assert alerts[0].target_view == ViewId.PATIENTS
        assert alerts[1].target_view == ViewId.EXAMINATIONS

    def test_no_alerts_when_up_to_date(self, engine):
        recent = make_patient(1, last_visit=NOW - timedelta(days=3))
        assert engine.dashboard_alerts([recent], [make_exam(1, 1, NOW)], now=NOW) == []


class TestOverview:
    def test_bundles_every_panel(self, engine, patients, examinations):
        overview = engine.overview(patients, examinations, [], now=NOW)
        assert overview.statistics.total_patients == 3
        assert overview.trends.examinations.this_week == 2
        assert len(overview.recent_activity) == 4
        assert overview.top_diagnoses[0].diagnosis == "Hypertension"
        assert overview.generated_at == NOW
