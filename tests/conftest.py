"""Pytest configuration shared by the name generation tests."""

import os
import sys
from pathlib import Path

# Ensure the package and the tests helpers are importable without an editable install.
_ROOT = Path(__file__).resolve().parents[1]
for _path in (_ROOT / "src", _ROOT):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

# 実トークンを使わないよう、テストでは既定で未設定にする。
os.environ.pop("HF_API_TOKEN", None)
os.environ.pop("HF_TOKEN", None)
