"""
Screen and category vocabulary shared by the recorder, dwell tracker and
attribution rules.

The screen names are the navigator route names used by the mobile client.
"""

from models.event import Category


# ---------- Screens ----------

SCREEN_DESCRIPTIONS = {
    "Home": "Home Screen",
    "Profile": "Profile",
    "Settings": "Settings",
    "Exercise": "Exercise",
    "Map": "Location Map",
    "MemoryGames": "Memory Games",
    "EverydayObjects": "Everyday Objects Game",
    "SequentialTasks": "Sequential Tasks Game",
    "VisualPairs": "Visual Pairs Game",
    "MatchingPairs": "Matching Pairs Game",
    "WordMemory": "Word Memory Game",
    "PuzzleChallenge": "Puzzle Challenge",
    "WordScramble": "Word Scramble Game",
    "ColorMatching": "Color Matching Game",
    "Activities": "Brain Training Activities",
    "Reminders": "Reminders",
    "Family": "Family Connections",
    "Caregiver": "Caregiver Connection",
    "Memories": "Photo Memories",
    "EmergencyCall": "Emergency Contacts",
    "Notifications": "Notifications",
}

# Login / authentication screens and the root container: never tracked
EXCLUDED_SCREENS = frozenset({
    "Welcome",
    "Login",
    "Signup",
    "ResetPassword",
    "CaregiverLogin",
    "CaregiverSignup",
    "CaregiverResetPassword",
    "AppContent",
})

SCREEN_TIME_PREFIX = "Time on "
SCREEN_DETAILS_PREFIX = "Screen:"


def friendly_screen_name(screen_name: str) -> str:
    return SCREEN_DESCRIPTIONS.get(screen_name, screen_name)


# ---------- Games ----------

MEMORY_GAMES = frozenset({
    "Everyday Objects Game",
    "Sequential Tasks Game",
    "Visual Pairs Game",
    "Matching Pairs Game",
    "Word Memory Game",
    "Puzzle Challenge",
    "Word Scramble Game",
    "Color Matching Game",
})


# ---------- Attribution vocabulary ----------

CAREGIVER_KEYWORD = "caregiver"

# Categories that are personal to one user and need an explicit mention
PERSONAL_CATEGORIES = frozenset({
    Category.HEALTH.value,
    Category.MEMORY_GAME.value,
    Category.GAME.value,
    Category.EXERCISE.value,
})

# Caregiver-side history view also treats setting changes as the patient's
PATIENT_CATEGORIES = PERSONAL_CATEGORIES | {Category.SETTING.value}

PATIENT_SCREEN_KEYWORDS = (
    "home", "profile", "memory", "game", "exercise", "reminder",
    "health", "family", "photo", "emergency", "setting", "notification",
)

GAME_CATEGORIES = frozenset({Category.GAME.value, Category.MEMORY_GAME.value})

# History screen filter tabs that cover more than one category
CATEGORY_VIEWS = {
    "Game": GAME_CATEGORIES,
    "Memory Game": GAME_CATEGORIES,
}
