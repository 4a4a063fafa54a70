"""Exercise workflow — validate a submission, persist it, mark the exercise complete."""

import logging

from playbook import supabase_client as db
from playbook.config import FRICTION_MIN_POINTS
from playbook.services.mailer import (
    EMAIL_RE,
    MAX_EMAIL_LEN,
    MAX_MESSAGE_LEN,
    MAX_SUBJECT_LEN,
    send_appreciation_email,
)
from playbook.services.progress import EXERCISES, LOCKED, exercise_status

logger = logging.getLogger(__name__)

FRICTION_CATEGORIES = [
    "Process Complexity",
    "Digital Enablement",
    "Cross-Functional Flow",
    "Knowledge Access",
    "Resource Alignment",
]

CATEGORY_PLACEHOLDERS = {
    "Process Complexity": "Where does the workflow feel heavier or slower than it needs to be?",
    "Digital Enablement": "How is the tool fighting against the task? Describe the friction.",
    "Cross-Functional Flow": "Where does momentum drop when work moves from one team to another?",
    "Knowledge Access": "What specific information or data is difficult to locate?",
    "Resource Alignment": "Where is the volume of work outpacing our capacity to deliver?",
}

ASSET_OPTIONS = ["Spreadsheet", "Form", "Email", "Meeting"]
DESIGN_TAGS = ["simpler", "smoother", "more beautiful"]

DEFAULT_SIGNAL_SUBJECT = "a signal of appreciation"

EXERCISE_CONTENT = {
    "friction": {
        "title": "the friction audit",
        "subtitle": "innovation strategy",
        "context_headline": "garrett morgan saw danger where others saw the status quo.",
        "context_body": (
            'He refused to tolerate the "daily hazards" of his time. Innovation starts with '
            'noticing what is broken. What "tolerated struggles" do you deal with every day?'
        ),
        "instruction": "log up to 3 minor inefficiencies or broken processes you encounter this week.",
        "submit_label": "submit to heatmap",
    },
    "makeover": {
        "title": "the mundane makeover",
        "subtitle": "product design",
        "context_headline": "adoption requires good design.",
        "context_body": (
            "Morgan understood that safety had to be wearable to be effective. At eos Products, "
            'we believe "smooth" applies to our internal tools, not just our lip balm.'
        ),
        "instruction": 'pick one "ugly" internal asset and describe how you would redesign it '
                       "using eos brand principles.",
        "submit_label": "draft design",
    },
    "visibility": {
        "title": "the visibility signal",
        "subtitle": "inclusion & culture",
        "context_headline": "making the invisible visible.",
        "context_body": (
            "Garrett Morgan was often erased from his own narrative. Today, we break that cycle "
            'by acknowledging the "quiet work" that keeps eos running.'
        ),
        "instruction": "identify one colleague in a support role (ops, qa, admin) and send a "
                       "signal of appreciation.",
        "submit_label": "send signal",
    },
}


def _failure(error: str, message: str) -> dict:
    return {"success": False, "error": error, "message": message}


# ---------------------------------------------------------------------------
# Validation: pure, returns (record, error message)
# ---------------------------------------------------------------------------

def validate_friction(form: dict, min_points: int = FRICTION_MIN_POINTS) -> tuple[list | None, str | None]:
    """Check the three friction points against the minimum-count policy.

    The first ``min_points`` points need both a category and text. Later
    points are optional, but a point with text still needs a category.
    """
    struggles = []
    for num in (1, 2, 3):
        category = (form.get(f"friction_category_{num}") or "").strip()
        text = (form.get(f"friction_text_{num}") or "").strip()
        required = num <= min_points

        if not text:
            if required:
                if min_points == 1:
                    return None, "we need at least your first friction point to continue."
                return None, f"we need {min_points} friction points to continue."
            struggles.append(None)
            continue

        if category not in FRICTION_CATEGORIES:
            return None, f"please pick a category for friction point #{num}."
        struggles.append(f"[{category}] {text}")

    return struggles, None


def validate_makeover(form: dict) -> tuple[str | None, str | None]:
    asset = (form.get("asset_type") or "").strip()
    text = (form.get("makeover_text") or "").strip()
    tags = [t for t in form.get("tags") or [] if t]

    if asset not in ASSET_OPTIONS or not text:
        return None, "we need your asset type and design ideas to continue."
    unknown = [t for t in tags if t not in DESIGN_TAGS]
    if unknown:
        return None, f"unknown design principle: {unknown[0]}"

    ordered = [t for t in DESIGN_TAGS if t in tags]
    suffix = f" [Tags: {', '.join(ordered)}]" if ordered else ""
    return f"[{asset}] {text}{suffix}", None


def validate_visibility(form: dict, sender_email: str) -> tuple[dict | None, str | None]:
    recipient = (form.get("recipient_email") or "").strip()
    subject = (form.get("subject") or "").strip() or DEFAULT_SIGNAL_SUBJECT
    message = (form.get("message") or "").strip()

    if not sender_email or not recipient or not message:
        return None, "we need the recipient email and your message."
    if not EMAIL_RE.match(recipient) or len(recipient) > MAX_EMAIL_LEN:
        return None, "please enter a valid recipient email."
    if len(subject) > MAX_SUBJECT_LEN:
        return None, f"subject must be {MAX_SUBJECT_LEN} characters or fewer."
    if len(message) > MAX_MESSAGE_LEN:
        return None, f"message must be {MAX_MESSAGE_LEN} characters or fewer."
    return {"recipient": recipient, "subject": subject, "message": message}, None


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

def submit_exercise(
    user_id: str,
    exercise: str,
    form: dict,
    sender_email: str = "",
    sender_name: str = "",
    min_friction_points: int = FRICTION_MIN_POINTS,
) -> dict:
    """Validate and persist one exercise submission.

    Submissions are append-only: a resubmission writes a new record, but
    the exercise key is only ever added once to modules_completed.

    Returns:
        dict with keys: success, error (validation | locked | persistence |
        mail), message, modules_completed (on success).
    """
    if exercise not in EXERCISES:
        return _failure("validation", f"unknown exercise: {exercise}")

    profile = db.get_profile(user_id) or {}
    if exercise_status(exercise, profile.get("modules_completed")) == LOCKED:
        return _failure("locked", "complete the previous exercise first.")

    if exercise == "friction":
        record, error = validate_friction(form, min_friction_points)
    elif exercise == "makeover":
        record, error = validate_makeover(form)
    else:
        record, error = validate_visibility(form, sender_email)
    if error:
        return _failure("validation", error)

    try:
        if exercise == "friction":
            modules = db.submit_friction_log(user_id, record)
        elif exercise == "makeover":
            modules = db.submit_makeover(user_id, record)
        else:
            modules = db.submit_visibility_signal(
                user_id,
                colleague_name=record["recipient"],
                impact_note=f"Subject: {record['subject']}\n\n{record['message']}",
            )
    except Exception:
        logger.exception("Failed to save %s submission for %s", exercise, user_id)
        return _failure("persistence", "failed to submit. please try again.")

    result = {
        "success": True,
        "error": None,
        "message": "great work! your response has been saved.",
        "modules_completed": modules,
    }

    if exercise == "visibility":
        # The record is already saved; a mail failure is reported, not rolled back.
        sent = send_appreciation_email(
            to=record["recipient"],
            subject=record["subject"],
            message=record["message"],
            sender_email=sender_email,
            sender_name=sender_name,
        )
        if sent["success"]:
            result["message"] = f"your appreciation for {record['recipient']} has been sent."
        else:
            result["error"] = "mail"
            result["message"] = "note saved, but email failed. your signal was still recorded."

    return result
