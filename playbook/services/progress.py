"""Progress state — which pulse survey to show and which exercises are open.

Everything here is a pure function of a profile snapshot. Writes that move a
profile forward (surveys, exercise completion) live in the workflow services.
"""

STATUSES = ["started", "survey_complete", "modules_complete"]

EXERCISES = ["friction", "makeover", "visibility"]

# exercise -> exercises that must be completed before first entry
PREREQUISITES = {
    "makeover": ["friction"],
}

LOCKED = "locked"
AVAILABLE = "available"
COMPLETED = "completed"


def completed_set(profile: dict | None) -> set[str]:
    """Exercise keys recorded on a profile, de-duplicated."""
    if not profile:
        return set()
    return set(profile.get("modules_completed") or [])


def exercise_status(exercise: str, modules_completed) -> str:
    """Status of one exercise card.

    A completed exercise stays completed even if its prerequisites are
    later missing; prerequisites only gate the first entry.
    """
    done = set(modules_completed or [])
    if exercise in done:
        return COMPLETED
    if any(req not in done for req in PREREQUISITES.get(exercise, [])):
        return LOCKED
    return AVAILABLE


def show_pre_pulse(status: str | None) -> bool:
    return status == "started"


def show_post_pulse(status: str | None, modules_completed) -> bool:
    done = set(modules_completed or [])
    return len(done) == len(EXERCISES) and status == "survey_complete"


def progress_state(profile: dict | None) -> dict:
    """Compute the full presentation state for a profile snapshot."""
    status = (profile or {}).get("status")
    done = completed_set(profile)
    return {
        "status": status,
        "show_pre_pulse": show_pre_pulse(status),
        "show_post_pulse": show_post_pulse(status, done),
        "exercises": {key: exercise_status(key, done) for key in EXERCISES},
        "completed_count": len(done & set(EXERCISES)),
        "total": len(EXERCISES),
        "certificate_ready": status == "modules_complete",
    }
