"""Tests for pulse surveys — scoring, availability, status transitions."""

import pytest

from playbook.tests.conftest import make_profile


class TestParseScores:
    def test_valid_scores(self):
        from playbook.services.surveys import parse_scores

        assert parse_scores("pre", ["4", "5"]) == ([4, 5], None)

    @pytest.mark.parametrize("raw", [["", "3"], ["0", "3"], ["4"]])
    def test_unanswered_rejected(self, raw):
        from playbook.services.surveys import parse_scores

        scores, error = parse_scores("pre", raw)
        assert scores is None
        assert error == "Please rate both questions."

    @pytest.mark.parametrize("raw", [["6", "3"], ["abc", "3"], ["-1", "2"]])
    def test_out_of_range_rejected(self, raw):
        from playbook.services.surveys import parse_scores

        _, error = parse_scores("post", raw)
        assert error == "scores must be whole numbers from 1 to 5."


class TestSubmitSurvey:
    def test_pre_survey_advances_status(self, fake_db):
        from playbook.services.surveys import submit_survey

        profile = make_profile()
        fake_db.store["profiles"].append(profile)

        result = submit_survey(profile["user_id"], "pre", ["2", "3"])
        assert result["success"] is True
        assert profile["status"] == "survey_complete"
        row = fake_db.store["pulse_surveys"][0]
        assert row["type"] == "pre"
        assert (row["q1_score"], row["q2_score"]) == (2, 3)

    def test_pre_survey_not_shown_after_completion(self, fake_db):
        from playbook.services.surveys import submit_survey

        profile = make_profile(status="survey_complete")
        fake_db.store["profiles"].append(profile)

        result = submit_survey(profile["user_id"], "pre", ["2", "3"])
        assert result["success"] is False
        assert fake_db.store["pulse_surveys"] == []
        assert profile["status"] == "survey_complete"

    def test_post_survey_requires_all_exercises(self, fake_db):
        from playbook.services.surveys import submit_survey

        profile = make_profile(status="survey_complete", modules_completed=["friction"])
        fake_db.store["profiles"].append(profile)

        result = submit_survey(profile["user_id"], "post", ["5", "5"])
        assert result["success"] is False
        assert profile["status"] == "survey_complete"

    def test_post_survey_completes_profile(self, fake_db):
        from playbook.services.surveys import submit_survey

        profile = make_profile(status="survey_complete",
                               modules_completed=["friction", "makeover", "visibility"])
        fake_db.store["profiles"].append(profile)

        result = submit_survey(profile["user_id"], "post", ["5", "4"])
        assert result["success"] is True
        assert profile["status"] == "modules_complete"

    def test_missing_rating_writes_nothing(self, fake_db):
        from playbook.services.surveys import submit_survey

        profile = make_profile()
        fake_db.store["profiles"].append(profile)

        result = submit_survey(profile["user_id"], "pre", ["3", ""])
        assert result["message"] == "Please rate both questions."
        assert fake_db.store["pulse_surveys"] == []
        assert profile["status"] == "started"

    @pytest.mark.parametrize("failing", ["pulse_surveys", "profiles"])
    def test_persistence_failure_commits_nothing(self, fake_db, failing):
        from playbook.services.surveys import submit_survey

        profile = make_profile()
        fake_db.store["profiles"].append(profile)
        fake_db.failing_writes.add(failing)

        result = submit_survey(profile["user_id"], "pre", ["3", "3"])
        assert result["error"] == "persistence"
        assert result["message"] == "Failed to submit survey. Please try again."
        assert fake_db.store["pulse_surveys"] == []
        assert profile["status"] == "started"

    def test_retry_after_failure_writes_one_survey(self, fake_db):
        from playbook.services.surveys import submit_survey

        profile = make_profile()
        fake_db.store["profiles"].append(profile)
        fake_db.failing_writes.add("profiles")
        submit_survey(profile["user_id"], "pre", ["3", "3"])
        fake_db.failing_writes.clear()

        result = submit_survey(profile["user_id"], "pre", ["3", "3"])
        assert result["success"] is True
        assert len(fake_db.store["pulse_surveys"]) == 1
        assert profile["status"] == "survey_complete"


class TestSubmitPulseSurveyRpc:
    def test_never_moves_backwards(self, fake_db):
        from playbook import supabase_client as db

        profile = make_profile(status="modules_complete")
        fake_db.store["profiles"].append(profile)

        db.submit_pulse_survey(profile["user_id"], "pre", [3, 3], "survey_complete")
        assert profile["status"] == "modules_complete"

    def test_moves_forward(self, fake_db):
        from playbook import supabase_client as db

        profile = make_profile(status="started")
        fake_db.store["profiles"].append(profile)

        db.submit_pulse_survey(profile["user_id"], "post", [4, 4], "modules_complete")
        assert profile["status"] == "modules_complete"
