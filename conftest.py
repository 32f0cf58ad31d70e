"""Global pytest configuration."""

import os
import tempfile

# Set DRAWINGS_DIR for tests before any imports
os.environ.setdefault("DRAWINGS_DIR", tempfile.mkdtemp(prefix="sketchvault-tests-"))
