import os
import tempfile

# Keep the import-time file handler out of the user's home directory.
os.environ.setdefault("WAVEGEN_LOG_DIR", tempfile.mkdtemp(prefix="wavegen-logs-"))
