from typing import Final, Tuple


APP_NAME_ENV: Final[str] = "APP_NAME"
DEFAULT_APP_NAME: Final[str] = "vibe"

LOG_LEVEL_ENV: Final[str] = "LOG_LEVEL"
LOG_FILE_NAME_ENV: Final[str] = "LOG_FILE_NAME"
TERM_WIDTH_ENV: Final[str] = "VIBE_TERM_WIDTH"
DEFAULT_LOG_FILE_NAME: Final[str] = "vibe.log"

CONFIG_FILENAME: Final[str] = "config.json"
CONTEXT_DIRNAME: Final[str] = "contexts"
GIT_DIRNAME: Final[str] = ".git"
GITIGNORE_FILENAME: Final[str] = ".gitignore"

AGENT_DEFINITION_EXT: Final[str] = ".mdc"
RULE_FILE_EXT: Final[str] = ".json"
TEMPLATE_EXT: Final[str] = ".tmpl"
TEMPLATES_DIRNAME: Final[str] = "templates"

MAX_AGENT_ID_LENGTH: Final[int] = 100
MAX_RULE_FILENAME_LENGTH: Final[int] = 100
METADATA_SCAN_LINES: Final[int] = 50
ROLE_MARKER: Final[str] = "## 🎯 Role:"

DEFAULT_RULE_VERSION: Final[str] = "1.0.0"
DEFAULT_AGENT_VERSION: Final[str] = "1.0"
DEFAULT_AGENT_TYPE: Final[str] = "ai"
LOCAL_AUTHOR: Final[str] = "local"
DEFAULT_TEMPLATE_NAME: Final[str] = "default"

# Never copied between the canonical store and a project.
COPY_EXCLUDED_DIRS: Final[Tuple[str, ...]] = (
    ".git",
    ".github",
    ".vscode",
    ".cursor",
    "node_modules",
)

DEFAULT_GITIGNORE_ENTRIES: Final[Tuple[str, ...]] = (
    "# OS files",
    ".DS_Store",
    "Thumbs.db",
    "*.swp",
    "",
    "# Cursor rules",
    ".cursor/",
    "",
)

EXIT_OK: Final[int] = 0
EXIT_USAGE_ERROR: Final[int] = 1
EXIT_INIT_ERROR: Final[int] = 2
EXIT_AGENT_ERROR: Final[int] = 3
EXIT_SETUP_ERROR: Final[int] = 4
