"""
Scoring Service - computes overall performance scores and rankings.

Implements the scoring formula on a common 0-10 scale:
1. attendance_on_10 = attendance_percentage / 10
2. overall = (w_t * technical + w_c * communication + w_a * attendance_on_10)
             / (w_t + w_c + w_a)
3. missing sub-scores contribute 0; a student with no sub-scores at all
   scores 0 and is never reported as a top performer
4. rank = 1-based position after a stable sort by overall score descending

Weights default to equal thirds and are configured through
TRAINCORE_SCORING_WEIGHTS, never hard-coded at call sites. Scores and
ranks are recomputed from current sub-scores on every call and never
persisted.
"""

import time
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, model_validator

from traincore import config
from traincore.logging_config import get_logger, log_with_context
from traincore.schemas import BatchStatus, StudentRow, load_rows
from traincore.services.attendance import attendance_by_student, to_percentage

# Channel logger for scoring operations
logger = get_logger("scoring")


class TieBreak(str, Enum):
    """How equal overall scores are ordered relative to each other."""
    INPUT = "input"
    STUDENT_CODE = "student_code"
    NAME = "name"


class ScoringWeights(BaseModel):
    """Relative weights of the three sub-scores; normalized by their sum."""
    technical: float = 1.0
    communication: float = 1.0
    attendance: float = 1.0

    @model_validator(mode="after")
    def _check_weights(self):
        values = (self.technical, self.communication, self.attendance)
        if any(w < 0 for w in values):
            raise ValueError("Scoring weights must be non-negative")
        if sum(values) <= 0:
            raise ValueError("At least one scoring weight must be positive")
        return self

    @property
    def total(self) -> float:
        return self.technical + self.communication + self.attendance


EQUAL_WEIGHTS = ScoringWeights()


class ScoreEntry(BaseModel):
    """One student's raw sub-scores, as fed to the ranking."""
    student_id: str
    student_code: str = ""
    name: str = ""
    batch_id: Optional[str] = None
    technical_score: Optional[float] = None
    communication_score: Optional[float] = None
    attendance_percentage: Optional[float] = None

    @property
    def has_scores(self) -> bool:
        return any(v is not None for v in (
            self.technical_score, self.communication_score, self.attendance_percentage))


class RankedStudent(BaseModel):
    """Output shape per student: {score, rank} plus the inputs behind it."""
    student_id: str
    student_code: str
    name: str
    batch_id: Optional[str] = None
    technical_score: float
    communication_score: float
    attendance_percentage: int
    score: float
    rank: int
    has_scores: bool


class TopPerformer(BaseModel):
    name: str
    score: float


class RankingsStats(BaseModel):
    top_performer: TopPerformer
    average_score: float
    total_students: int
    active_batches: int


def parse_weights(value: str) -> ScoringWeights:
    """
    Parse "technical=2,communication=1,attendance=1" into ScoringWeights.

    Omitted keys keep their default of 1. Raises ValueError on unknown
    keys or non-numeric values.
    """
    if not value or not value.strip():
        return EQUAL_WEIGHTS
    parsed = {}
    for part in value.split(","):
        if not part.strip():
            continue
        key, sep, raw = part.partition("=")
        key = key.strip().lower()
        if not sep or key not in ScoringWeights.model_fields:
            raise ValueError("Unrecognized scoring weight '{}'".format(part.strip()))
        parsed[key] = float(raw)
    return ScoringWeights(**parsed)


def get_scoring_weights() -> ScoringWeights:
    """Weights from TRAINCORE_SCORING_WEIGHTS; equal thirds if malformed."""
    try:
        return parse_weights(config.SCORING_WEIGHTS)
    except ValueError as e:
        log_with_context(logger, "WARNING",
            "Invalid TRAINCORE_SCORING_WEIGHTS, using equal weights: {}".format(e),
            extra_data={"value": config.SCORING_WEIGHTS})
        return EQUAL_WEIGHTS


def get_tie_break() -> TieBreak:
    try:
        return TieBreak(config.RANK_TIE_BREAK)
    except ValueError:
        log_with_context(logger, "WARNING",
            "Invalid TRAINCORE_RANK_TIE_BREAK '{}', using input order".format(config.RANK_TIE_BREAK))
        return TieBreak.INPUT


def overall_score(technical: Optional[float], communication: Optional[float],
                  attendance_percentage: Optional[float],
                  weights: ScoringWeights = EQUAL_WEIGHTS) -> float:
    """
    Weighted mean of the three sub-scores on the 0-10 scale.

    The result is unrounded; callers round only for display.
    """
    technical = technical or 0.0
    communication = communication or 0.0
    attendance_on_10 = (attendance_percentage or 0.0) / 10

    weighted_sum = (
        technical * weights.technical
        + communication * weights.communication
        + attendance_on_10 * weights.attendance
    )
    return weighted_sum / weights.total


def build_score_entries(student_rows: Iterable[dict],
                        attendance_rows: Iterable[dict]) -> List[ScoreEntry]:
    """
    Join students with their pooled attendance into ScoreEntry records.

    Input order is preserved; it is the default tie-break.
    """
    students = load_rows(StudentRow, student_rows)
    attendance = attendance_by_student(attendance_rows)
    return [
        ScoreEntry(
            student_id=s.id,
            student_code=s.student_code,
            name=s.full_name,
            batch_id=s.batch_id,
            technical_score=s.technical_score,
            communication_score=s.communication_score,
            attendance_percentage=attendance.get(s.id),
        )
        for s in students
    ]


def _sort_key(tie_break: TieBreak):
    if tie_break is TieBreak.STUDENT_CODE:
        return lambda pair: (-pair[1], pair[0].student_code)
    if tie_break is TieBreak.NAME:
        return lambda pair: (-pair[1], pair[0].name.lower())
    return lambda pair: -pair[1]


def rank_students(entries: Iterable[ScoreEntry],
                  weights: Optional[ScoringWeights] = None,
                  tie_break: Optional[TieBreak] = None) -> List[RankedStudent]:
    """
    Score every entry and assign ranks 1..N by overall score descending.

    The sort is stable; equal scores are ordered by `tie_break` and, for
    TieBreak.INPUT, by their position in `entries`.
    """
    start_time = time.time()
    if weights is None:
        weights = get_scoring_weights()
    tie_break = TieBreak(tie_break) if tie_break is not None else get_tie_break()

    scored = [
        (entry, overall_score(entry.technical_score, entry.communication_score,
                              entry.attendance_percentage, weights))
        for entry in entries
    ]
    scored.sort(key=_sort_key(tie_break))

    ranked = [
        RankedStudent(
            student_id=entry.student_id,
            student_code=entry.student_code,
            name=entry.name,
            batch_id=entry.batch_id,
            technical_score=entry.technical_score or 0.0,
            communication_score=entry.communication_score or 0.0,
            attendance_percentage=to_percentage((entry.attendance_percentage or 0.0) / 100),
            score=round(score, 2) if entry.has_scores else 0.0,
            rank=rank,
            has_scores=entry.has_scores,
        )
        for rank, (entry, score) in enumerate(scored, 1)
    ]

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Ranked {} students (tie_break={})".format(len(ranked), tie_break.value),
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "weights": weights.model_dump(),
        })
    return ranked


def top_performer(ranked: Iterable[RankedStudent]) -> Optional[RankedStudent]:
    """Highest-ranked student that actually has recorded sub-scores."""
    for student in sorted(ranked, key=lambda s: s.rank):
        if student.has_scores:
            return student
    return None


def rankings_stats(ranked: List[RankedStudent], active_batches: int = 0) -> RankingsStats:
    """Summary card values for the rankings page."""
    best = top_performer(ranked)
    average = sum(s.score for s in ranked) / len(ranked) if ranked else 0.0
    return RankingsStats(
        top_performer=TopPerformer(name=best.name, score=best.score) if best
        else TopPerformer(name="N/A", score=0),
        average_score=round(average, 1),
        total_students=len(ranked),
        active_batches=active_batches,
    )


def category_averages(entries: Iterable[ScoreEntry]) -> Dict[str, float]:
    """
    Cohort mean of each sub-score, over students that have it recorded.

    technical and communication stay on 0-10, attendance on 0-100.
    """
    entries = list(entries)

    def _mean(values):
        values = [v for v in values if v is not None]
        return round(sum(values) / len(values), 1) if values else 0.0

    return {
        "technical": _mean(e.technical_score for e in entries),
        "communication": _mean(e.communication_score for e in entries),
        "attendance": _mean(e.attendance_percentage for e in entries),
    }


def average_score(ranked: Iterable[RankedStudent], batch_id: Optional[str] = None) -> float:
    """Mean display score, optionally for one batch, to 1 decimal."""
    scores = [s.score for s in ranked if batch_id is None or s.batch_id == batch_id]
    return round(sum(scores) / len(scores), 1) if scores else 0.0


def validate_module(current_module: int, total_modules: Optional[int] = None) -> int:
    """Raise ValueError unless 1 <= current_module <= total_modules."""
    total_modules = total_modules or config.TOTAL_MODULES
    if not 1 <= current_module <= total_modules:
        raise ValueError("Module must be between 1 and {}".format(total_modules))
    return current_module


def module_progress(status: str, current_module: Optional[int],
                    total_modules: Optional[int] = None) -> int:
    """
    Batch progress percentage derived from status and module index.

    upcoming -> 0, completed -> 100, otherwise the share of modules already
    finished: (current_module - 1) / total_modules, rounded to whole percent.
    current_module is clamped into [1, total_modules].
    """
    total_modules = total_modules or config.TOTAL_MODULES
    status = BatchStatus(status)
    if status is BatchStatus.UPCOMING:
        return 0
    if status is BatchStatus.COMPLETED:
        return 100
    module = min(max(current_module or 1, 1), total_modules)
    return to_percentage((module - 1) / total_modules)
