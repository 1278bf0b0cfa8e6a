import sys
from pathlib import Path

# Ensure repo root is on sys.path so `import poi_radio` works under all pytest import modes.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: starts real HTTP servers on localhost")
