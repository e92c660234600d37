"""
Attribution: deciding which user an event in the shared log belongs to.

The activity log is shared by everyone who signs in on a device, so every
history view filters it through an ordered list of rules. Each rule looks at
one event and either decides (True = include, False = exclude) or abstains
(None). The first rule that decides wins; an event no rule decides on is
excluded.

Three rule sets are defined:

  USER_RULES            the signed-in user's own history (settings screen)
  PATIENT_HISTORY_RULES a caregiver looking at their patient's history
  PATIENT_SCREEN_TIME_RULES  the patient's ScreenTime samples only

USER_RULES, in order:
  caregiver_keyword      "caregiver" anywhere in activity/details/category → exclude
                         (wins even over an exact id match)
  identity_match         userId == user.id or userEmail == user.email → include
  caregiver_screen       Navigation to a screen whose name contains "caregiver" → exclude
  personal_category      Health / Memory Game / Game / Exercise: include only
                         when the text mentions the user's email
  session_heuristic      no identity fields and created after lastLogin → include
  email_mention          text mentions the user's email → include
  navigation_fallback    remaining Navigation events → exclude
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional

from models.event import ActivityEvent, Category
from models.user import CurrentUser
from tracking.vocabulary import (
    CAREGIVER_KEYWORD,
    CATEGORY_VIEWS,
    PATIENT_CATEGORIES,
    PATIENT_SCREEN_KEYWORDS,
    PERSONAL_CATEGORIES,
    SCREEN_DETAILS_PREFIX,
)

DEFAULT_RULE = "default_deny"


@dataclass(frozen=True)
class Subject:
    """Whose history is being assembled."""

    email: str                      # lowercased, stripped
    id: Optional[str] = None
    last_login: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: CurrentUser) -> "Subject":
        return cls(email=user.normalized_email, id=user.id, last_login=user.last_login)


Decision = Optional[bool]


@dataclass(frozen=True)
class Rule:
    name: str
    decide: Callable[[ActivityEvent, Subject], Decision]


# ---------- Event text helpers ----------

def _combined_text(event: ActivityEvent) -> str:
    return f"{event.activity} {event.details_text} {event.category}".lower()


def _activity_details_text(event: ActivityEvent) -> str:
    return f"{event.activity} {event.details_text}".lower()


def navigation_screen(event: ActivityEvent) -> Optional[str]:
    """Screen name from a Navigation event's "Screen: <name>" details."""
    details = event.details_text
    if SCREEN_DETAILS_PREFIX not in details:
        return None
    return details.split(SCREEN_DETAILS_PREFIX, 1)[1].strip() or None


def _email_matches(event: ActivityEvent, subject: Subject) -> bool:
    return bool(event.user_email) and event.user_email.strip().lower() == subject.email


def _mentions_email(text: str, subject: Subject) -> bool:
    return bool(subject.email) and subject.email in text


def _is_navigation(event: ActivityEvent) -> bool:
    return event.category == Category.NAVIGATION.value


# ---------- Signed-in user rules ----------

def _caregiver_keyword(event: ActivityEvent, subject: Subject) -> Decision:
    return False if CAREGIVER_KEYWORD in _combined_text(event) else None


def _identity_match(event: ActivityEvent, subject: Subject) -> Decision:
    if subject.id and event.user_id and event.user_id == subject.id:
        return True
    return True if _email_matches(event, subject) else None


def _caregiver_screen(event: ActivityEvent, subject: Subject) -> Decision:
    if not _is_navigation(event):
        return None
    screen = navigation_screen(event)
    if screen and CAREGIVER_KEYWORD in screen.lower():
        return False
    return None


def _personal_category(event: ActivityEvent, subject: Subject) -> Decision:
    if event.category not in PERSONAL_CATEGORIES:
        return None
    return _mentions_email(_combined_text(event), subject)


def _session_heuristic(event: ActivityEvent, subject: Subject) -> Decision:
    if event.user_email or event.user_id:
        return None
    if subject.last_login is None or event.timestamp > subject.last_login:
        return True
    return None


def _email_mention(event: ActivityEvent, subject: Subject) -> Decision:
    return True if _mentions_email(_combined_text(event), subject) else None


def _navigation_fallback(event: ActivityEvent, subject: Subject) -> Decision:
    return False if _is_navigation(event) else None


USER_RULES: tuple[Rule, ...] = (
    Rule("caregiver_keyword", _caregiver_keyword),
    Rule("identity_match", _identity_match),
    Rule("caregiver_screen", _caregiver_screen),
    Rule("personal_category", _personal_category),
    Rule("session_heuristic", _session_heuristic),
    Rule("email_mention", _email_mention),
    Rule("navigation_fallback", _navigation_fallback),
)


# ---------- Caregiver-side patient history rules ----------

def _caregiver_user_type(event: ActivityEvent, subject: Subject) -> Decision:
    if event.user_type and event.user_type.lower() == CAREGIVER_KEYWORD:
        return False
    return None


def _patient_email_match(event: ActivityEvent, subject: Subject) -> Decision:
    return True if _email_matches(event, subject) else None


def _patient_navigation(event: ActivityEvent, subject: Subject) -> Decision:
    if not _is_navigation(event):
        return None
    text = _activity_details_text(event)
    if CAREGIVER_KEYWORD in text:
        return False
    return any(keyword in text for keyword in PATIENT_SCREEN_KEYWORDS)


def _patient_category(event: ActivityEvent, subject: Subject) -> Decision:
    return True if event.category in PATIENT_CATEGORIES else None


def _patient_mention(event: ActivityEvent, subject: Subject) -> Decision:
    return True if _mentions_email(_activity_details_text(event), subject) else None


PATIENT_HISTORY_RULES: tuple[Rule, ...] = (
    Rule("caregiver_keyword", _caregiver_keyword),
    Rule("caregiver_user_type", _caregiver_user_type),
    Rule("identity_match", _patient_email_match),
    Rule("patient_navigation", _patient_navigation),
    Rule("patient_category", _patient_category),
    Rule("email_mention", _patient_mention),
)


# ---------- Patient screen-time rules ----------

def _screen_time_only(event: ActivityEvent, subject: Subject) -> Decision:
    return False if event.category != Category.SCREEN_TIME.value else None


def _caregiver_screen_time(event: ActivityEvent, subject: Subject) -> Decision:
    return False if CAREGIVER_KEYWORD in event.activity.lower() else None


def _patient_user_type(event: ActivityEvent, subject: Subject) -> Decision:
    if event.user_type != "patient":
        return None
    # Tagged patient, but recorded under someone else's email
    if event.user_email and event.user_email.strip().lower() != subject.email:
        return False
    return True


PATIENT_SCREEN_TIME_RULES: tuple[Rule, ...] = (
    Rule("screen_time_only", _screen_time_only),
    Rule("identity_match", _patient_email_match),
    Rule("caregiver_screen_time", _caregiver_screen_time),
    Rule("patient_user_type", _patient_user_type),
)


# ---------- Engine ----------

def attribute(event: ActivityEvent, subject: Subject, rules: Iterable[Rule]) -> tuple[bool, str]:
    """Return (included, name of the deciding rule)."""
    for rule in rules:
        decision = rule.decide(event, subject)
        if decision is not None:
            return decision, rule.name
    return False, DEFAULT_RULE


def apply_rules(
    events: Iterable[ActivityEvent], subject: Subject, rules: Iterable[Rule]
) -> list[ActivityEvent]:
    rules = tuple(rules)
    return [event for event in events if attribute(event, subject, rules)[0]]


def filter_for_user(
    events: Iterable[ActivityEvent], current_user: Optional[CurrentUser]
) -> list[ActivityEvent]:
    """
    The signed-in user's history. Without a user (or one with no email) the
    log is returned unfiltered, which is what demo / signed-out mode shows.
    """
    if current_user is None or not current_user.normalized_email:
        return list(events)
    return apply_rules(events, Subject.from_user(current_user), USER_RULES)


def filter_patient_history(
    events: Iterable[ActivityEvent], patient_email: Optional[str]
) -> list[ActivityEvent]:
    """A patient's history as shown to their caregiver. No email → nothing."""
    email = (patient_email or "").strip().lower()
    if not email:
        return []
    return apply_rules(events, Subject(email=email), PATIENT_HISTORY_RULES)


def filter_patient_screen_time(
    events: Iterable[ActivityEvent], patient_email: Optional[str]
) -> list[ActivityEvent]:
    email = (patient_email or "").strip().lower()
    if not email:
        return []
    return apply_rules(events, Subject(email=email), PATIENT_SCREEN_TIME_RULES)


def filter_by_category(events: Iterable[ActivityEvent], view: str = "all") -> list[ActivityEvent]:
    """History tab filter: "all", a category, or a grouped view such as "Game"."""
    if view == "all":
        return list(events)
    categories = CATEGORY_VIEWS.get(view, frozenset({view}))
    return [event for event in events if event.category in categories]
