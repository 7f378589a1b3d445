import os
from dotenv import load_dotenv

load_dotenv()

# Spin physics
BASE_ROTATIONS = 3.0          # full turns at power 0
POWER_SPREAD = 10.0           # extra full turns at power 1
EXTRA_ROTATION_RANGE = 2.0    # random extra turns, at least 2 segments' worth on any wheel
MIN_SPIN_DURATION_MS = 4000
POWER_DURATION_MS = 4000      # added as power drops: 4s (fast) .. 8s (slow)
FRAME_INTERVAL_MS = 16.67

# Drag momentum (60 Hz equivalent)
MOMENTUM_FRICTION = 0.95
MOMENTUM_MIN_START = 0.5      # rad/s needed to start coasting after a drag
MOMENTUM_MIN_VELOCITY = 0.01  # rad/s below which the wheel stops

# Tick sound volume bounds while spinning
TICK_MIN_VOLUME = 0.01
TICK_MAX_VOLUME = 0.08

# Wheel contents
RESPIN_LABEL = "RESPIN"
INCLUDE_FREE_SPINS = True
DEFAULT_NAMES = ["Name 1", "Name 2", "Name 3", "Name 4", "Name 5", "Name 6"]

# Name input
MIN_NAMES = 2
MAX_NAME_LENGTH = 20
DEFAULT_RANDOM_COUNT = 10
MAX_RANDOM_COUNT = 99

# Local session store
DB_PATH = os.getenv(
    "WHEEL_DB_PATH",
    os.path.join(os.path.dirname(__file__), "db", "wheel.db"),
)
SESSION_EXPIRY_DAYS = 30

# Hosted database (Supabase / PostgREST)
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_PLACEHOLDERS = {"your_supabase_project_url", "your_supabase_anon_key"}
REMOTE_TIMEOUT = 10
REMOTE_TABLES = ["sessions", "wheel_configurations", "spin_results"]
# Postgres unique / check violations: the row is already there or was rejected for good
IGNORED_CONSTRAINT_CODES = {"23505", "23514"}
USER_AGENT_MAX_LENGTH = 500

# Background sync
SYNC_INTERVAL_SECONDS = 5.0
SYNC_MAX_RETRIES = 3
SYNC_RETRY_BACKOFF_SECONDS = 2.0

# IP lookup for session metadata
IP_LOOKUP_URL = "https://httpbin.org/ip"
IP_LOOKUP_TIMEOUT = 3

# Shareable links
SLUG_SUFFIX_LENGTH = 4
SLUG_BASE_MAX_LENGTH = 50
SLUG_MIN_LENGTH = 5
SLUG_MAX_LENGTH = 60
DEFAULT_SLUG_BASE = "wheel"
SLUG_MAX_ATTEMPTS = 5

# Fairness self-tests
FAIRNESS_TRIALS = 10_000
FAIRNESS_CONFIDENCE = 0.95
FAIRNESS_POWER_LEVELS = [0.0, 0.25, 0.5, 0.75, 1.0]
TRANSITION_BIAS_THRESHOLD = 0.05
