"""Configuration constants for the analysis and reporting pipeline."""
from __future__ import annotations

import os

# Which classifier tier(s) to use: "auto", "openai" or "lexicon"
CLASSIFIER_BACKEND: str = os.getenv("CLASSIFIER_BACKEND", "auto").strip().lower()

# Per-call timeout for the remote classification request (seconds)
CLASSIFIER_TIMEOUT_SECONDS: float = float(
    os.getenv("CLASSIFIER_TIMEOUT_SECONDS", "15")
)

# Keyword ranking used by the local tier: "frequency" or "significance"
KEYWORD_STRATEGY: str = os.getenv("KEYWORD_STRATEGY", "frequency").strip().lower()

# Maximum keywords returned per comment
MAX_KEYWORDS_PER_COMMENT: int = 10

# Thread pool width for batch fan-out
ANALYSIS_MAX_WORKERS: int = int(os.getenv("ANALYSIS_MAX_WORKERS", "8"))

# Size of the corpus-wide keyword table
MAX_KEYWORDS: int = int(os.getenv("REPORT_MAX_KEYWORDS", "50"))

# Maximum number of emojis displayed in the sentiment bar
MAX_EMOJI_BAR: int = int(os.getenv("REPORT_MAX_EMOJI_BAR", "20"))

# Keywords listed in the Slack dashboard message
MAX_DASHBOARD_KEYWORDS: int = int(os.getenv("REPORT_MAX_DASHBOARD_KEYWORDS", "10"))

# Safety cap on comments held per workspace
MAX_COMMENTS_PER_WORKSPACE: int = int(
    os.getenv("MAX_COMMENTS_PER_WORKSPACE", "5000")
)

# Timeout for downloading a file shared in Slack (seconds)
FILE_DOWNLOAD_TIMEOUT_SECONDS: float = float(
    os.getenv("FILE_DOWNLOAD_TIMEOUT_SECONDS", "10")
)
