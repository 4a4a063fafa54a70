"""Admin reporting — role check and aggregation queries."""

from playbook import supabase_client as db
from playbook.config import DEFAULT_TOTAL_SEATS
from playbook.services.surveys import QUESTIONS

ADMIN_ROLE = "admin"
MAX_CODE_BATCH = 500


def is_admin(user_id: str | None) -> bool:
    """Server-side role lookup. Never trusts anything the client sends."""
    if not user_id:
        return False
    return db.has_role(user_id, ADMIN_ROLE)


def seat_summary() -> dict:
    row = db.get_seat_inventory() or {}
    return {
        "total": row.get("total_seats") or DEFAULT_TOTAL_SEATS,
        "claimed": row.get("claimed_seats") or 0,
    }


def completion_rate(completed: int, claimed: int) -> int:
    """Completed profiles as a whole percentage of claimed seats, halves rounded up."""
    if not claimed:
        return 0
    # floor(completed * 100 / claimed + 0.5) in integer arithmetic
    return (completed * 200 + claimed) // (claimed * 2)


def question_averages(rows: list[dict], questions: int) -> list[float | None]:
    """Mean score per question, ignoring unanswered columns."""
    averages = []
    for i in range(1, questions + 1):
        scores = [r[f"q{i}_score"] for r in rows if r.get(f"q{i}_score")]
        averages.append(round(sum(scores) / len(scores), 2) if scores else None)
    return averages


def overall_mean(averages: list[float | None]) -> float | None:
    values = [a for a in averages if a is not None]
    if not values:
        return None
    return sum(values) / len(values)


def survey_delta(pre_mean: float | None, post_mean: float | None) -> float | None:
    if pre_mean is None or post_mean is None:
        return None
    return round(post_mean - pre_mean, 2)


def format_delta(delta: float | None) -> str:
    """Signed two-decimal delta, e.g. +1.60."""
    if delta is None:
        return "—"
    return f"{delta:+.2f}"


def survey_summary() -> dict:
    """Per-question averages for each cohort and the overall pre/post delta."""
    summary = {}
    for survey_type, questions in QUESTIONS.items():
        rows = db.get_pulse_surveys(survey_type)
        averages = question_averages(rows, len(questions))
        mean = overall_mean(averages)
        summary[survey_type] = {
            "responses": len(rows),
            "questions": [
                {"text": text, "average": avg} for text, avg in zip(questions, averages)
            ],
            "mean": round(mean, 2) if mean is not None else None,
        }
    delta = survey_delta(summary["pre"]["mean"], summary["post"]["mean"])
    summary["delta"] = delta
    summary["delta_display"] = format_delta(delta)
    return summary


def dashboard_report() -> dict:
    """Everything the admin view shows. Call only after is_admin()."""
    seats = seat_summary()
    completed = db.count_profiles("modules_complete")
    return {
        "seats": seats,
        "completed": completed,
        "completion_rate": completion_rate(completed, seats["claimed"]),
        "surveys": survey_summary(),
        "friction_logs": db.get_friction_logs(limit=50),
        "audit_log": db.get_audit_log(limit=10),
    }


def generate_codes(count: int, admin_id: str) -> dict:
    """Generate a batch of access codes and record it in the audit log."""
    if not 1 <= count <= MAX_CODE_BATCH:
        return {"success": False, "message": f"count must be between 1 and {MAX_CODE_BATCH}"}
    codes = db.generate_access_codes(count)
    db.log_action("access_codes_generated", "access_code", admin_id,
                  f"Generated {len(codes)} codes")
    return {"success": True, "codes": codes, "message": f"Generated {len(codes)} codes"}
