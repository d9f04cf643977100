import sys
from pathlib import Path


# backend/src holds flat top-level modules (config, models, services.*); make them importable in tests.
ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
