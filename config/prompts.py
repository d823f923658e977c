"""Everything the avatar says that is not catalog content.

The knowledge base is handed to the streaming avatar at session creation and
only shapes its free-form ("talk") answers; scripted lines below are spoken
verbatim.
"""

KNOWLEDGE_BASE = " ".join([
    "You are a friendly assistant for Drivestream and ERP training. Keep replies under 3 sentences.",
    "Greet only once at the beginning.",
    "If asked about Drivestream, answer briefly and include a helpful page link when possible.",
    "If the question is out of scope, say: 'There isn't enough information for that. "
    "Try asking about Drivestream or ERP Module 1/2.'",
])

# ── Session start (spoken once per session) ──────────────────────────
GREETING_LINES = (
    "Hi there! How are you? I hope you're doing good.",
    "What is your name, and where are you studying?",
)

# ── Background switch ────────────────────────────────────────────────
BACKGROUND_ACK = "Glad to hear from the great {label}."
MENU_QUESTION = "What would you like to know: Drivestream topics or ERP training?"

# ── Topics ───────────────────────────────────────────────────────────
TOPIC_ANSWER = "{summary} You can learn more here: {url}"
TOPIC_FOLLOW_UP = "Would you like to hear about ERP training as well, or explore another Drivestream topic?"

# ── Modules and media ────────────────────────────────────────────────
SKIP_VIDEO = "Okay, I'll skip the video. What would you like next?"
MEDIA_FINISHED = "The video has finished. What would you like next?"
MEDIA_CLOSED = "Closed the video. What would you like to do next?"
MEDIA_LOAD_FAILED = "I couldn't load the module video. Please try again."

# ── Fallbacks ────────────────────────────────────────────────────────
NOT_ENOUGH_INFO = "There isn't enough information for that. Try asking about Drivestream or ERP Module 1/2."
NOT_ENOUGH_INFO_SHORT = "There isn't enough information for that."

# ── Inactivity ───────────────────────────────────────────────────────
IDLE_PROMPT = "Are you still there?"
