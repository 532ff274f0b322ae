import os
import tempfile
from pathlib import Path

# Storage root shared by every namespace (snapshot files + content directories)
DEFAULT_STORAGE_ROOT = Path(
    os.getenv("SIMPLE_CACHE_ROOT", "").strip() or Path(tempfile.gettempdir()) / "simple_cache"
).absolute()

# Metadata snapshot persistence
SNAPSHOT_SUFFIX = ".json"  # <root>/<namespace>.json
FLUSH_DEBOUNCE_SECONDS = float(os.getenv("SIMPLE_CACHE_FLUSH_DEBOUNCE", "0.1"))  # 100ms

# Atomic writes go through a hidden sibling file, then os.replace()
TEMP_FILE_PREFIX = "."
TEMP_FILE_SUFFIX = ".tmp"

# Engine defaults
DEFAULT_EVICT_ON_READ = False

# Prefix used by the virtual (in-memory) variant for registry keys
VIRTUAL_LOCATION_PREFIX = "memory://"
