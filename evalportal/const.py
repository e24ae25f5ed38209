"""Constants for the evaluation portal front end."""

# Configuration
ENV_API_URL = "EVALPORTAL_API_URL"
ENV_TOKEN_FILE = "EVALPORTAL_TOKEN_FILE"
ENV_TIMEOUT = "EVALPORTAL_TIMEOUT"
ENV_EMAIL = "EVALPORTAL_EMAIL"
ENV_PASSWORD = "EVALPORTAL_PASSWORD"

# Default values
DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_TOKEN_FILE = "~/.evalportal/session.json"
DEFAULT_TIMEOUT = 30.0

# Persisted client state
TOKEN_STORAGE_KEY = "token"

# Navigation targets
HOME_PATH = "/"
LOGIN_PATH = "/login"
TEACHERS_PATH = "/teachers"

# Form error keys
ERROR_BASE = "base"

# Screen messages
MSG_NO_ASSIGNMENT_SELECTED = "Geen opdracht geselecteerd"
MSG_ASSIGNMENT_NOT_FOUND = "Opdracht niet gevonden"
MSG_ALREADY_GRADED = "Deze opdracht is al beoordeeld"
MSG_NO_COURSE_SELECTED = "Geen cursus geselecteerd"
MSG_UNKNOWN_STUDENT = "Onbekende student: {student_id}"
MSG_PASSWORDS_DO_NOT_MATCH = "Passwords do not match"
