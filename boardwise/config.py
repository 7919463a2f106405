"""
Single place for application configuration.
Values can be overridden through environment variables.
"""

import os

# Prefix for persisted play-state keys: <prefix>-play-state-<board_id>
STORAGE_PREFIX = os.environ.get("BOARDWISE_STORAGE_PREFIX", "boardwise")

# Delay between pawn hops; doubled when a board enables epilepsy-safe mode.
ANIMATION_STEP_MS = int(os.environ.get("BOARDWISE_STEP_MS", "300"))

# Heroku-style URLs use postgres://; SQLAlchemy 2.x expects postgresql://
_raw_url = os.environ.get("DATABASE_URL")
if _raw_url and _raw_url.startswith("postgres://"):
    DATABASE_URL = _raw_url.replace("postgres://", "postgresql://", 1)
elif _raw_url:
    DATABASE_URL = _raw_url
else:
    DATABASE_URL = f"sqlite:///{os.path.join(os.path.dirname(os.path.abspath(__file__)), 'boardwise.db')}"

# Quiz generation / translation service (black box JSON endpoint)
AI_SERVICE_URL = os.environ.get("BOARDWISE_AI_URL", "http://localhost:5001")
AI_SERVICE_KEY = os.environ.get("BOARDWISE_AI_KEY", "")
AI_TIMEOUT_SECONDS = 120
