import os
import sys

_TESTS_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_TESTS_DIR)

# backend modules and the CLI scripts are imported by bare module name
for _subdir in ("backend", "scripts"):
    sys.path.insert(0, os.path.join(_PROJECT_ROOT, _subdir))

# fake_llm lives beside the test modules
sys.path.insert(0, os.path.join(_TESTS_DIR, "backend_tests"))
