"""
Runtime configuration read from environment variables.

Every tunable business policy lives here rather than as a constant buried
in a service module:
- DATABASE_URL: SQLAlchemy connection string (SQLite fallback for local dev)
- LOG_LEVEL: root log level for the structured JSON logger
- TRAINCORE_TOTAL_MODULES: number of modules in the training program
- TRAINCORE_SCORING_WEIGHTS: "technical=1,communication=1,attendance=1"
- TRAINCORE_RANK_TIE_BREAK: input | student_code | name
"""

import os

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./traincore.db"
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

TOTAL_MODULES = int(os.getenv("TRAINCORE_TOTAL_MODULES", "3"))

SCORING_WEIGHTS = os.getenv("TRAINCORE_SCORING_WEIGHTS", "")

RANK_TIE_BREAK = os.getenv("TRAINCORE_RANK_TIE_BREAK", "input").strip().lower()

# Header carrying the caller's resolved role. The hosted auth provider sits
# in front of this service and sets it after session verification.
ROLE_HEADER = "X-Admin-Role"
