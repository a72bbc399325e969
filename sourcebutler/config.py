# sourcebutler/config.py

# Per-root configuration record (JSON)
CONFIG_FILENAME = ".sourcebutler-config"

# Folder names never scanned: VCS metadata, CI metadata, dependency cache
EXCLUDED_FOLDER_NAMES_DEFAULT = frozenset({
    ".git",
    ".github",
    "node_modules",
})

# Content filters
MAX_FILE_BYTES = 1024 * 1024              # 1 MiB, inclusive
BINARY_SNIFF_BYTES = 1024                 # leading bytes checked for NUL

# Export
DEFAULT_OUTPUT_FILENAME = "source_output.txt"

APP_NAME = "SourceButler"
APP_AUTHOR = "SourceButler"
