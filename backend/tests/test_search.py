"""Tests for patient search."""
from physician_dashboard.models.patient import Patient
from physician_dashboard.seed_demo import seed_patients
from physician_dashboard.services.search import search_patients


class TestSearchPatients:
    def setup_method(self):
        self.patients = [Patient.model_validate(p) for p in seed_patients()]

    def test_empty_query_returns_everyone_in_order(self):
        assert [p.id for p in search_patients(self.patients, "")] == [1, 2, 3]
        assert [p.id for p in search_patients(self.patients, "   ")] == [1, 2, 3]

    def test_matches_first_name_case_insensitively(self):
        assert [p.id for p in search_patients(self.patients, "jOhN")] == [1, 3]

    def test_matches_full_name(self):
        assert [p.id for p in search_patients(self.patients, "jane smith")] == [2]

    def test_matches_phone_and_email(self):
        assert [p.id for p in search_patients(self.patients, "987-65")] == [2]
        assert [p.id for p in search_patients(self.patients, "robert.johnson@")] == [3]

    def test_no_match(self):
        assert search_patients(self.patients, "zzz") == []

    def test_result_is_subset_in_input_order(self):
        reversed_input = list(reversed(self.patients))
        result = search_patients(reversed_input, "o")
        assert [p.id for p in result] == [p.id for p in reversed_input if p in result]

    def test_repeated_search_is_identical(self):
        assert search_patients(self.patients, "SMITH") == search_patients(self.patients, "SMITH")

    def test_does_not_mutate_input(self):
        before = list(self.patients)
        search_patients(self.patients, "doe")
        assert self.patients == before
