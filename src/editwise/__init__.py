"""editwise: AI-assisted file editing and code-quality analysis.

Edits a file from a natural-language instruction through an LLM oracle and
reviews whole directories for issues and suggestions.
"""

from editwise.analyzer import analyze_codebase, analyze_file, summarize
from editwise.apply import apply_edits, apply_suggestions
from editwise.config import (
    Config,
    EditSettings,
    LLMConfig,
    SessionSettings,
    get_edit_settings,
    get_llm_config,
    load_config,
)
from editwise.editor import EditOptions, execute_edit, prepare_edit, run_edit
from editwise.llm_client import LLMClient, LLMRequest, LLMResponse, Oracle, create_llm_client
from editwise.models import AnalysisResult, EditSuggestion, FileEditAnalysis

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "Config",
    "load_config",
    "LLMConfig",
    "EditSettings",
    "SessionSettings",
    "get_llm_config",
    "get_edit_settings",
    # LLM Client
    "Oracle",
    "LLMClient",
    "LLMRequest",
    "LLMResponse",
    "create_llm_client",
    # Models
    "EditSuggestion",
    "FileEditAnalysis",
    "AnalysisResult",
    # Flows
    "apply_suggestions",
    "apply_edits",
    "EditOptions",
    "prepare_edit",
    "execute_edit",
    "run_edit",
    "analyze_file",
    "analyze_codebase",
    "summarize",
]
