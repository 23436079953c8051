"""
Request builders for the edit and analysis flows.

Building a request reads optional context files but never calls the oracle.

editwise/src/editwise/prompts.py
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from editwise.errors import ContextFileUnreadableError
from editwise.llm_client import LLMRequest
from editwise.models import AnalysisResult, FileEditAnalysis
from editwise.utils import read_text

__all__ = [
    "EditRequest",
    "ContextFile",
    "read_context_files",
    "build_edit_prompt",
    "build_edit_request",
    "build_analysis_prompt",
    "build_analysis_request",
    "EDIT_TEMPERATURE",
    "EDIT_MAX_TOKENS",
    "ANALYSIS_TEMPERATURE",
]

logger = logging.getLogger(__name__)

EDIT_TEMPERATURE = 0.3
EDIT_MAX_TOKENS = 8192
ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_TOP_P = 1.0

_EDIT_FOCUS = """Focus on:
1. Implementing the requested changes accurately
2. Maintaining code style and conventions
3. Ensuring backward compatibility where possible
4. Highlighting any potential breaking changes
5. Suggesting improvements for code quality

Provide specific line-by-line edits with high confidence scores only."""


@dataclass
class ContextFile:
    path: Path
    content: str


@dataclass
class EditRequest:
    """A fully built edit request plus what happened to its context files."""

    llm_request: LLMRequest
    language: str
    context_files: List[ContextFile] = field(default_factory=list)
    skipped_context: List[ContextFileUnreadableError] = field(default_factory=list)

    @property
    def prompt(self) -> str:
        return self.llm_request.content


def read_context_files(
    paths: Sequence[Path],
) -> tuple[List[ContextFile], List[ContextFileUnreadableError]]:
    """Read context files best-effort; unreadable ones are logged and skipped."""
    read: List[ContextFile] = []
    skipped: List[ContextFileUnreadableError] = []

    for path in paths:
        try:
            read.append(ContextFile(path=path, content=read_text(path)))
        except (OSError, UnicodeDecodeError) as e:
            error = ContextFileUnreadableError(path, str(e))
            logger.warning(str(error))
            skipped.append(error)

    return read, skipped


def _edit_response_shape(language: str) -> str:
    return f"""{{
  "language": "{language}",
  "complexity": 1-10,
  "suggestions": [
    {{
      "originalLines": ["line1", "line2"],
      "suggestedLines": ["new_line1", "new_line2"],
      "startLine": 5,
      "endLine": 6,
      "reasoning": "Why this change is needed",
      "confidence": 85
    }}
  ],
  "risks": ["potential risk 1", "potential risk 2"],
  "dependencies": ["file1.js", "module2"]
}}"""


def build_edit_prompt(
    file_path: Path,
    content: str,
    language: str,
    instruction: str,
    context_files: Sequence[ContextFile] = (),
) -> str:
    """Render the edit prompt text."""
    context_block = ""
    if context_files:
        context_block = "Context Files:" + "".join(
            f"\n--- Context: {ctx.path} ---\n{ctx.content}\n" for ctx in context_files
        )

    return f"""You are an expert {language} developer. Analyze this file and provide specific editing suggestions.

File: {file_path}
Edit Request: {instruction}

Current Code:
```{language}
{content}
```

{context_block}

Line numbers are 1-based and refer to the current code above; startLine and endLine are inclusive.

Please provide your analysis in this JSON format:
{_edit_response_shape(language)}

{_EDIT_FOCUS}
"""


def build_edit_request(
    file_path: Path,
    content: str,
    language: str,
    instruction: str,
    context_files: Optional[Sequence[Path]] = None,
    abort_signal: Optional[asyncio.Event] = None,
) -> EditRequest:
    """Build the oracle request for an edit.

    Context files that cannot be read are left out of the prompt and reported
    in ``EditRequest.skipped_context``.
    """
    read, skipped = read_context_files(list(context_files or []))
    prompt = build_edit_prompt(file_path, content, language, instruction, read)

    llm_request = LLMRequest(
        content=prompt,
        max_tokens=EDIT_MAX_TOKENS,
        temperature=EDIT_TEMPERATURE,
        structured_output={
            "json_schema": {
                "name": "file_edit_analysis",
                "schema": FileEditAnalysis.model_json_schema(by_alias=True),
            }
        },
        abort_signal=abort_signal,
    )
    return EditRequest(
        llm_request=llm_request, language=language, context_files=read, skipped_context=skipped
    )


_ANALYSIS_SHAPE = """{
  "issues": [
    {
      "line": number,
      "column": number,
      "severity": "error|warning|info",
      "message": "description",
      "type": "security|performance|maintainability|style|bug"
    }
  ],
  "suggestions": [
    {
      "line": number,
      "type": "optimization|refactor|documentation|test",
      "description": "suggestion description",
      "suggestedCode": "optional code suggestion"
    }
  ],
  "metrics": {
    "complexity": number (1-10),
    "maintainabilityIndex": number (0-100),
    "performance": "excellent|good|fair|poor",
    "security": "secure|moderate|vulnerable"
  }
}"""


def build_analysis_prompt(code: str, language: str, full_analysis: bool) -> str:
    """Render the code-quality review prompt.

    A full analysis additionally asks for architecture and testing commentary;
    the response shape is the same.
    """
    categories = [
        "Security vulnerabilities and best practices",
        "Performance optimization opportunities",
        "Code maintainability and readability",
        "Potential bugs and error conditions",
        "Style and convention adherence",
    ]
    if full_analysis:
        categories += ["Design patterns and architecture suggestions", "Testing recommendations"]
    category_lines = "\n".join(f"- {c}" for c in categories)

    return f"""Analyze this {language} code and provide a detailed assessment. Return your analysis in the following JSON format:

{_ANALYSIS_SHAPE}

Please analyze for:
{category_lines}

Code to analyze:
```{language}
{code}
```"""


def build_analysis_request(
    code: str,
    language: str,
    full_analysis: bool,
    abort_signal: Optional[asyncio.Event] = None,
) -> LLMRequest:
    schema = AnalysisResult.model_json_schema(by_alias=True)
    # The file path is filled in locally, not by the oracle.
    schema.get("properties", {}).pop("file", None)
    if "required" in schema:
        schema["required"] = [key for key in schema["required"] if key != "file"]

    return LLMRequest(
        content=build_analysis_prompt(code, language, full_analysis),
        temperature=ANALYSIS_TEMPERATURE,
        top_p=ANALYSIS_TOP_P,
        structured_output={"json_schema": {"name": "code_analysis", "schema": schema}},
        abort_signal=abort_signal,
    )
