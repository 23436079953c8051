"""
Single-file edit flow.

``prepare_edit`` reads the file, asks the oracle for suggestions, filters
them and computes the would-be content without touching the file.
``execute_edit`` takes that plan through the confirmation gate, writes the
backup and overwrites the original. Keeping the two apart lets the caller
show a preview in between.

editwise/src/editwise/editor.py
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

from editwise.apply import ApplyResult, apply_edits
from editwise.config import DEFAULT_CONFIDENCE_THRESHOLD, SessionSettings
from editwise.errors import ContextFileUnreadableError, TargetNotFoundError
from editwise.hitl import ConfirmFn
from editwise.languages import language_for_path
from editwise.llm_client import Oracle
from editwise.models import FileEditAnalysis
from editwise.parsing import ParseResult, edit_fallback, parse_edit_response
from editwise.prompts import build_edit_request
from editwise.session import record_session
from editwise.suggestions import apply_suggestion_filter
from editwise.utils import create_backup, read_text, write_text

__all__ = [
    "EditOptions",
    "EditStatus",
    "EditPlan",
    "EditOutcome",
    "generate_edit_analysis",
    "prepare_edit",
    "execute_edit",
    "run_edit",
    "APPLY_PROMPT",
]

logger = logging.getLogger(__name__)

APPLY_PROMPT = (
    "Apply these changes to the file? "
    "(This will modify the original file. Make sure you have backups.)"
)


@dataclass
class EditOptions:
    dry_run: bool = False
    backup: bool = True
    auto_apply: bool = False
    context_files: List[Path] = field(default_factory=list)
    confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD


class EditStatus(Enum):
    NO_SUGGESTIONS = "no_suggestions"
    DRY_RUN = "dry_run"
    APPLIED = "applied"
    CANCELLED = "cancelled"


@dataclass
class EditPlan:
    """Everything computed for an edit before anything is written."""

    file_path: Path
    instruction: str
    original_content: str
    analysis: FileEditAnalysis
    new_content: str
    apply_result: ApplyResult
    degraded: bool = False
    error: Optional[str] = None
    skipped_context: List[ContextFileUnreadableError] = field(default_factory=list)

    @property
    def has_suggestions(self) -> bool:
        return bool(self.analysis.suggestions)


@dataclass
class EditOutcome:
    status: EditStatus
    plan: EditPlan
    backup_path: Optional[Path] = None

    @property
    def written(self) -> bool:
        return self.status is EditStatus.APPLIED


async def generate_edit_analysis(
    file_path: Path,
    content: str,
    instruction: str,
    oracle: Oracle,
    context_files: Optional[Sequence[Path]] = None,
    confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD,
    abort_signal: Optional[asyncio.Event] = None,
) -> tuple[ParseResult[FileEditAnalysis], List[ContextFileUnreadableError]]:
    """Ask the oracle for edit suggestions and keep the acceptable ones.

    Oracle errors, cancellation and unparseable answers all produce a
    degraded result carrying the minimal fallback analysis; nothing is raised.
    Also returns the context files that had to be skipped.
    """
    language = language_for_path(file_path)
    edit_request = build_edit_request(
        file_path, content, language, instruction, context_files, abort_signal
    )

    try:
        response = await oracle.generate(edit_request.llm_request)
    except Exception as e:
        logger.error(f"Error analyzing file: {e}")
        return ParseResult.degraded(edit_fallback(language), str(e)), edit_request.skipped_context

    if not response.success:
        error = response.error or "Oracle call failed"
        logger.error(f"Error analyzing file: {error}")
        return ParseResult.degraded(edit_fallback(language), error), edit_request.skipped_context

    parsed = parse_edit_response(response.content, language)
    if not parsed.is_ok:
        return parsed, edit_request.skipped_context

    filtered = apply_suggestion_filter(parsed.value, confidence_threshold)
    return ParseResult.ok(filtered), edit_request.skipped_context


async def prepare_edit(
    file_path: Path,
    instruction: str,
    oracle: Oracle,
    options: Optional[EditOptions] = None,
    abort_signal: Optional[asyncio.Event] = None,
) -> EditPlan:
    """Analyze file_path and compute the edited content without writing it.

    Raises:
        TargetNotFoundError: If file_path does not exist.
        OSError, UnicodeDecodeError: If the file itself cannot be read.
    """
    options = options or EditOptions()
    if not file_path.is_file():
        raise TargetNotFoundError(file_path)

    content = read_text(file_path)
    parsed, skipped_context = await generate_edit_analysis(
        file_path,
        content,
        instruction,
        oracle,
        context_files=options.context_files,
        confidence_threshold=options.confidence_threshold,
        abort_signal=abort_signal,
    )
    new_content, apply_result = apply_edits(content, parsed.value.suggestions)

    if apply_result.skipped:
        logger.info(
            f"{len(apply_result.skipped)} suggestion(s) for {file_path} no longer fit "
            "the file and will not be applied"
        )

    return EditPlan(
        file_path=file_path,
        instruction=instruction,
        original_content=content,
        analysis=parsed.value,
        new_content=new_content,
        apply_result=apply_result,
        degraded=not parsed.is_ok,
        error=parsed.error,
        skipped_context=skipped_context,
    )


def execute_edit(
    plan: EditPlan,
    options: EditOptions,
    confirm: ConfirmFn,
    settings: Optional[SessionSettings] = None,
) -> EditOutcome:
    """Apply a prepared plan to disk.

    The confirmation gate is asked once unless options.auto_apply is set.
    With backups enabled, the backup is written before the original; if the
    backup fails the OSError propagates and the original is left untouched.
    """
    if not plan.has_suggestions:
        logger.info(f"No changes suggested for {plan.file_path}")
        return EditOutcome(EditStatus.NO_SUGGESTIONS, plan)

    if options.dry_run:
        logger.info(f"Dry run for {plan.file_path}; nothing written")
        return EditOutcome(EditStatus.DRY_RUN, plan)

    if not options.auto_apply and not confirm(APPLY_PROMPT):
        logger.info(f"Changes to {plan.file_path} cancelled by user")
        return EditOutcome(EditStatus.CANCELLED, plan)

    backup_path = None
    if options.backup:
        backup_path = create_backup(plan.file_path, plan.original_content)

    write_text(plan.file_path, plan.new_content)
    logger.info(
        f"Modified {len(plan.apply_result.applied)} section(s) in {plan.file_path}"
    )

    if settings is not None:
        record_session(
            settings,
            "edit",
            plan.file_path,
            {
                "instruction": plan.instruction,
                "applied": len(plan.apply_result.applied),
                "skipped": len(plan.apply_result.skipped),
                "backup": str(backup_path) if backup_path else None,
            },
        )

    return EditOutcome(EditStatus.APPLIED, plan, backup_path=backup_path)


async def run_edit(
    file_path: Path,
    instruction: str,
    oracle: Oracle,
    confirm: ConfirmFn,
    options: Optional[EditOptions] = None,
    settings: Optional[SessionSettings] = None,
    abort_signal: Optional[asyncio.Event] = None,
) -> EditOutcome:
    """Prepare and execute an edit in one go, without a preview step."""
    options = options or EditOptions()
    plan = await prepare_edit(file_path, instruction, oracle, options, abort_signal)
    return execute_edit(plan, options, confirm, settings)
