"""
Test configuration and fixtures
"""
import sys
from pathlib import Path

# Add project root, src and the tests directory to Python path
tests_root = Path(__file__).parent
project_root = tests_root.parent
src_path = project_root / "src"

sys.path.insert(0, str(project_root))
sys.path.insert(0, str(src_path))
sys.path.insert(0, str(tests_root))
