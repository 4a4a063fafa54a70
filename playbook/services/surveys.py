"""Pulse surveys — pre/post Likert questionnaires that move profile status forward."""

import logging

from playbook import supabase_client as db
from playbook.services.progress import progress_state

logger = logging.getLogger(__name__)

QUESTIONS = {
    "pre": [
        "I feel empowered to identify and fix broken processes in my daily workflow.",
        "I feel that my behind-the-scenes contributions are visible and valued.",
    ],
    "post": [
        "After this experience, I feel better equipped to spot innovation opportunities.",
        "I feel a stronger sense of belonging with my team.",
    ],
}

# survey type -> status reached once it is submitted
NEXT_STATUS = {
    "pre": "survey_complete",
    "post": "modules_complete",
}

MIN_SCORE = 1
MAX_SCORE = 5


def parse_scores(survey_type: str, raw: list) -> tuple[list[int] | None, str | None]:
    """Coerce form values to Likert scores. Missing or zero means unanswered."""
    expected = len(QUESTIONS[survey_type])
    scores = []
    for value in list(raw)[:expected] + [None] * (expected - len(raw)):
        try:
            score = int(value) if value not in (None, "") else 0
        except (TypeError, ValueError):
            return None, "scores must be whole numbers from 1 to 5."
        if score == 0:
            return None, "Please rate both questions." if expected == 2 else "Please rate every question."
        if not MIN_SCORE <= score <= MAX_SCORE:
            return None, "scores must be whole numbers from 1 to 5."
        scores.append(score)
    return scores, None


def submit_survey(user_id: str, survey_type: str, raw_scores: list) -> dict:
    """Record a pulse survey and advance the profile status.

    Only accepted while the dashboard would show that survey, so each
    user answers each survey once in the normal flow.
    """
    if survey_type not in QUESTIONS:
        return {"success": False, "error": "validation", "message": f"unknown survey: {survey_type}"}

    profile = db.get_profile(user_id)
    state = progress_state(profile)
    if not state[f"show_{survey_type}_pulse"]:
        return {"success": False, "error": "validation",
                "message": "this survey is not available right now."}

    scores, error = parse_scores(survey_type, raw_scores)
    if error:
        return {"success": False, "error": "validation", "message": error}

    try:
        db.submit_pulse_survey(user_id, survey_type, scores, NEXT_STATUS[survey_type])
    except Exception:
        logger.exception("Failed to save %s survey for %s", survey_type, user_id)
        return {"success": False, "error": "persistence",
                "message": "Failed to submit survey. Please try again."}

    return {"success": True, "error": None, "message": "thanks for your feedback.",
            "status": NEXT_STATUS[survey_type]}
