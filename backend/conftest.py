# Ensure 'backend/' is on sys.path so 'import venue_booking' works
# when the suite is run from the repository root without an install.
import os
from pathlib import Path
import sys

_BACKEND_ROOT = Path(__file__).resolve().parent
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

# Settings are read at import time; point them at the in-memory test database.
os.environ.setdefault("IS_TESTING", "true")
