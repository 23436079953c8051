"""
Data model for edit suggestions and code-quality analysis.

The models double as the wire schema of the oracle's JSON answers: field
aliases are the camelCase keys the oracle is asked to produce, and
``model_json_schema(by_alias=True)`` is sent along as a structured-output
hint.

editwise/src/editwise/models.py
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    "EditSuggestion",
    "FileEditAnalysis",
    "IssueSeverity",
    "IssueType",
    "SuggestionType",
    "PerformanceRating",
    "SecurityRating",
    "CodeIssue",
    "CodeSuggestion",
    "CodeMetrics",
    "AnalysisResult",
]


class _WireModel(BaseModel):
    """Base for models exchanged with the oracle."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class EditSuggestion(_WireModel):
    """One proposed replacement of an original line range."""

    original_lines: List[str] = Field(
        alias="originalLines", description="Current content expected at the range"
    )
    suggested_lines: List[str] = Field(alias="suggestedLines", description="Replacement content")
    start_line: int = Field(alias="startLine", ge=1, description="1-based first line, inclusive")
    end_line: int = Field(alias="endLine", ge=1, description="1-based last line, inclusive")
    reasoning: str = Field(default="", description="Why this change is needed")
    confidence: int = Field(ge=0, le=100, description="Confidence score 0-100")

    @model_validator(mode="after")
    def _check_range(self) -> "EditSuggestion":
        if self.start_line > self.end_line:
            raise ValueError(
                f"startLine ({self.start_line}) must not exceed endLine ({self.end_line})"
            )
        return self


class FileEditAnalysis(_WireModel):
    """Result of analyzing one file for an edit request."""

    language: str
    complexity: int = Field(default=5, ge=1, le=10)
    suggestions: List[EditSuggestion]
    risks: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)


class IssueSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class IssueType(str, Enum):
    SECURITY = "security"
    PERFORMANCE = "performance"
    MAINTAINABILITY = "maintainability"
    STYLE = "style"
    BUG = "bug"


class SuggestionType(str, Enum):
    OPTIMIZATION = "optimization"
    REFACTOR = "refactor"
    DOCUMENTATION = "documentation"
    TEST = "test"


class PerformanceRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class SecurityRating(str, Enum):
    SECURE = "secure"
    MODERATE = "moderate"
    VULNERABLE = "vulnerable"


class CodeIssue(_WireModel):
    """A problem the oracle found in a file."""

    line: int
    column: int = 0
    severity: IssueSeverity
    message: str
    type: IssueType


class CodeSuggestion(_WireModel):
    """An improvement the oracle proposes for a file."""

    line: int
    type: SuggestionType
    description: str
    suggested_code: Optional[str] = Field(default=None, alias="suggestedCode")


class CodeMetrics(_WireModel):
    """Advisory quality metrics for one file.

    Complexity is 1-10 when reported by the oracle; the neutral metrics used
    for files that could not be analyzed carry 0.
    """

    complexity: float = Field(ge=0, le=10)
    maintainability_index: float = Field(alias="maintainabilityIndex", ge=0, le=100)
    test_coverage: Optional[float] = Field(default=None, alias="testCoverage", ge=0, le=100)
    performance: PerformanceRating
    security: SecurityRating


class AnalysisResult(_WireModel):
    """Code-quality review of one file."""

    file: str
    issues: List[CodeIssue] = Field(default_factory=list)
    suggestions: List[CodeSuggestion] = Field(default_factory=list)
    metrics: CodeMetrics
