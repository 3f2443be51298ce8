# interview_store.py
"""
Persistent store for interviews, their evaluation lifecycle and error logs.

Every evaluation_status transition is a single conditional UPDATE checked by
rowcount, so concurrent workers (webhook, periodic sweep, manual retry) can
never both own the same interview, across processes and restarts.
"""

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from pydantic import ValidationError
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    case,
    create_engine,
    or_,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from evaluation_config import DATABASE_URL, truncate_error
from evaluation_errors import InterviewNotFoundError, PersistenceError
from evaluation_models import (
    Competency,
    ErrorLogEntry,
    EvaluationContext,
    EvaluationStatus,
    IN_FLIGHT_STATUSES,
    InterviewSnapshot,
    InterviewStatus,
    QAPair,
    Question,
    QuestionEvaluationRecord,
    QuestionScore,
    QuestionType,
    ScreeningAnswer,
    StructuredEvaluation,
)
from voice_provider import render_transcript_messages

logger = logging.getLogger(__name__)

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


# SQLAlchemy ORM Models

class DBRole(Base):
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    jd_text = Column(Text, default="")
    created_at = Column(DateTime, default=_now)


class DBCompetency(Base):
    __tablename__ = "competencies"

    id = Column(String(36), primary_key=True, default=_uuid)
    role_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    weight = Column(Integer, nullable=False, default=2)  # 1 nice-to-have, 2 important, 3 critical
    rubric = Column(JSON, default=dict)  # {"1": anchor, ..., "4": anchor}


class DBQuestion(Base):
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True, default=_uuid)
    role_id = Column(String(36), nullable=False, index=True)
    text = Column(Text, nullable=False)
    type = Column(String(20), nullable=False)  # screening | interview
    order_index = Column(Integer, nullable=False, default=0)
    competency_id = Column(String(36), nullable=True)


class DBInterview(Base):
    __tablename__ = "interviews"

    id = Column(String(36), primary_key=True, default=_uuid)
    slug = Column(String(64), unique=True, nullable=False, index=True)
    role_id = Column(String(36), nullable=False, index=True)
    candidate_id = Column(String(36), nullable=True)
    status = Column(String(20), nullable=False, default=InterviewStatus.INVITED.value)
    evaluation_status = Column(String(20), nullable=False, default=EvaluationStatus.NONE.value, index=True)
    evaluation_attempt = Column(Integer, nullable=False, default=0)
    external_call_id = Column(String(255), nullable=True, index=True)
    transcript = Column(JSON, nullable=True)  # {"text": str, "messages": [...]}
    recording_url = Column(String(1024), nullable=True)
    score = Column(Integer, nullable=True)
    recommendation = Column(String(20), nullable=True)
    structured_evaluation = Column(JSON, nullable=True)
    evaluation_error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now)
    completed_at = Column(DateTime, nullable=True)
    queued_at = Column(DateTime, nullable=True)
    claimed_at = Column(DateTime, nullable=True)
    evaluation_completed_at = Column(DateTime, nullable=True)


class DBQuestionEvaluation(Base):
    __tablename__ = "question_evaluations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    interview_id = Column(String(36), nullable=False)
    question_id = Column(String(36), nullable=False)
    competency_id = Column(String(36), nullable=True)
    attempt = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)
    strengths = Column(JSON, default=list)
    concerns = Column(JSON, default=list)
    evidence_quotes = Column(JSON, default=list)
    why_not_higher_score = Column(Text, default="")
    degraded = Column(Boolean, default=False)
    created_at = Column(DateTime, default=_now)

    __table_args__ = (
        UniqueConstraint("interview_id", "question_id", "attempt", name="uq_question_evaluation_attempt"),
        Index("idx_question_eval_interview", "interview_id", "attempt"),
    )


class DBScreeningSummary(Base):
    __tablename__ = "screening_summaries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    interview_id = Column(String(36), nullable=False)
    question_id = Column(String(36), nullable=False)
    attempt = Column(Integer, nullable=False)
    raw_answer = Column(Text, default="")
    summary = Column(Text, nullable=True)
    duration_seconds = Column(Integer, default=0)
    created_at = Column(DateTime, default=_now)

    __table_args__ = (
        UniqueConstraint("interview_id", "question_id", "attempt", name="uq_screening_summary_attempt"),
    )


class DBErrorLog(Base):
    __tablename__ = "error_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    endpoint = Column(String(255), nullable=False)
    error_type = Column(String(100), nullable=False)
    error_message = Column(Text, nullable=False)
    error_stack = Column(Text, nullable=True)
    interview_id = Column(String(36), nullable=True, index=True)
    interview_slug = Column(String(64), nullable=True)
    candidate_id = Column(String(36), nullable=True)
    request_body = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=_now, index=True)
    resolved_at = Column(DateTime, nullable=True)
    resolution_notes = Column(Text, nullable=True)


class EnqueueStatus(str, Enum):
    QUEUED = "queued"
    DUPLICATE = "duplicate"
    IN_FLIGHT = "in_flight"
    NOT_FOUND = "not_found"


@dataclass
class EnqueueOutcome:
    status: EnqueueStatus
    interview_id: Optional[str] = None


_IN_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}
_CALL_NOT_ENDED = (InterviewStatus.INVITED.value, InterviewStatus.IN_PROGRESS.value)


class InterviewStore:
    """
    Persistence layer for the evaluation pipeline.
    Writes other than status transitions are append-only.
    """

    def __init__(self, db_url: Optional[str] = None, *, engine: Optional[Engine] = None):
        """
        Initialize the store.

        Args:
            db_url: SQLAlchemy URL (defaults to DATABASE_URL)
            engine: Pre-built engine, used instead of db_url when given
        """
        if engine is None:
            db_url = db_url or DATABASE_URL
            kwargs: Dict[str, Any] = {}
            if db_url.startswith("sqlite"):
                kwargs["connect_args"] = {"check_same_thread": False}
            if db_url in _IN_MEMORY_URLS:
                kwargs["poolclass"] = StaticPool
            engine = create_engine(db_url, echo=False, **kwargs)

        self.engine = engine
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        # Create tables if they don't exist
        Base.metadata.create_all(self.engine)

        logger.info("Interview store initialized with database: %s", self.engine.url)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("interview_store_operation_failed", extra={"error": str(exc)}, exc_info=True)
            raise PersistenceError(f"Database operation failed: {exc}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # Role / question / interview creation (invitation-time data entry)

    def create_role(self, *, title: str, jd_text: str = "") -> str:
        with self.session_scope() as session:
            role = DBRole(title=title, jd_text=jd_text)
            session.add(role)
            session.flush()
            return role.id

    def create_competency(
        self,
        *,
        role_id: str,
        name: str,
        weight: int,
        rubric: Dict[int, str],
        description: str = "",
    ) -> str:
        # Validate through the domain model before writing.
        Competency(id="new", name=name, description=description, weight=weight, rubric=rubric)
        with self.session_scope() as session:
            competency = DBCompetency(
                role_id=role_id,
                name=name,
                description=description,
                weight=weight,
                rubric={str(level): anchor for level, anchor in rubric.items()},
            )
            session.add(competency)
            session.flush()
            return competency.id

    def create_question(
        self,
        *,
        role_id: str,
        text: str,
        question_type: QuestionType,
        order_index: int,
        competency_id: Optional[str] = None,
    ) -> str:
        with self.session_scope() as session:
            question = DBQuestion(
                role_id=role_id,
                text=text,
                type=QuestionType(question_type).value,
                order_index=order_index,
                competency_id=competency_id,
            )
            session.add(question)
            session.flush()
            return question.id

    def create_interview(
        self,
        *,
        role_id: str,
        slug: str,
        candidate_id: Optional[str] = None,
        status: InterviewStatus = InterviewStatus.INVITED,
    ) -> str:
        with self.session_scope() as session:
            interview = DBInterview(
                role_id=role_id,
                slug=slug,
                candidate_id=candidate_id,
                status=InterviewStatus(status).value,
                evaluation_status=EvaluationStatus.NONE.value,
            )
            session.add(interview)
            session.flush()
            return interview.id

    # Reads

    def get_interview(self, interview_id: str) -> Optional[InterviewSnapshot]:
        with self.session_scope() as session:
            db_interview = session.query(DBInterview).filter_by(id=interview_id).first()
            return self._to_snapshot(db_interview) if db_interview else None

    def get_interview_by_slug(self, slug: str) -> Optional[InterviewSnapshot]:
        with self.session_scope() as session:
            db_interview = session.query(DBInterview).filter_by(slug=slug).first()
            return self._to_snapshot(db_interview) if db_interview else None

    def load_evaluation_context(self, interview_id: str) -> EvaluationContext:
        """
        Load the transcript, role and ordered questions for a claimed interview.

        Raises:
            InterviewNotFoundError: if the interview or its role is missing
        """
        with self.session_scope() as session:
            db_interview = session.query(DBInterview).filter_by(id=interview_id).first()
            if not db_interview:
                raise InterviewNotFoundError("Interview not found", interview_id=interview_id)

            db_role = session.query(DBRole).filter_by(id=db_interview.role_id).first()
            if not db_role:
                raise InterviewNotFoundError(
                    f"Role {db_interview.role_id} not found for interview", interview_id=interview_id
                )

            db_questions = (
                session.query(DBQuestion)
                .filter_by(role_id=db_role.id)
                .order_by(DBQuestion.order_index)
                .all()
            )
            competency_ids = [q.competency_id for q in db_questions if q.competency_id]
            competencies: Dict[str, Competency] = {}
            if competency_ids:
                for db_competency in session.query(DBCompetency).filter(DBCompetency.id.in_(competency_ids)):
                    competencies[db_competency.id] = Competency(
                        id=db_competency.id,
                        name=db_competency.name,
                        description=db_competency.description or "",
                        weight=db_competency.weight,
                        rubric=db_competency.rubric or {},
                    )

            questions: List[Question] = []
            for db_question in db_questions:
                try:
                    questions.append(
                        Question(
                            id=db_question.id,
                            text=db_question.text,
                            type=db_question.type,
                            order_index=db_question.order_index,
                            competency=competencies.get(db_question.competency_id or ""),
                        )
                    )
                except ValidationError as exc:
                    logger.warning(
                        "question_skipped_invalid",
                        extra={"interview_id": interview_id, "question_id": db_question.id, "error": str(exc)},
                    )

            text, _ = self._split_transcript(db_interview.transcript)
            return EvaluationContext(
                interview_id=db_interview.id,
                slug=db_interview.slug,
                attempt=db_interview.evaluation_attempt,
                role_title=db_role.title,
                jd_text=db_role.jd_text or "",
                transcript_text=text,
                questions=questions,
            )

    def get_question_evaluations(
        self, interview_id: str, attempt: Optional[int] = None
    ) -> List[QuestionEvaluationRecord]:
        """
        Question evaluations of one attempt (the interview's current attempt by default).
        Rows of superseded attempts are kept but never merged in.
        """
        with self.session_scope() as session:
            if attempt is None:
                db_interview = session.query(DBInterview).filter_by(id=interview_id).first()
                if not db_interview:
                    return []
                attempt = db_interview.evaluation_attempt

            rows = (
                session.query(DBQuestionEvaluation)
                .filter_by(interview_id=interview_id, attempt=attempt)
                .order_by(DBQuestionEvaluation.id)
                .all()
            )
            return [
                QuestionEvaluationRecord(
                    question_id=row.question_id,
                    competency_id=row.competency_id,
                    attempt=row.attempt,
                    degraded=bool(row.degraded),
                    score=row.score,
                    strengths=row.strengths or [],
                    concerns=row.concerns or [],
                    evidence_quotes=row.evidence_quotes or [],
                    why_not_higher_score=row.why_not_higher_score or "",
                )
                for row in rows
            ]

    def count_question_evaluations(self, interview_id: str) -> int:
        """Total rows across all attempts."""
        with self.session_scope() as session:
            return session.query(DBQuestionEvaluation).filter_by(interview_id=interview_id).count()

    def get_screening_summaries(self, interview_id: str, attempt: int) -> List[ScreeningAnswer]:
        with self.session_scope() as session:
            rows = (
                session.query(DBScreeningSummary)
                .filter_by(interview_id=interview_id, attempt=attempt)
                .order_by(DBScreeningSummary.id)
                .all()
            )
            return [
                ScreeningAnswer(
                    question_id=row.question_id,
                    raw_answer=row.raw_answer or "",
                    summary=row.summary,
                    duration_seconds=row.duration_seconds or 0,
                )
                for row in rows
            ]

    # Evaluation lifecycle transitions

    def enqueue_transcript(
        self,
        *,
        slug: str,
        external_call_id: Optional[str],
        transcript_text: str,
        messages: Optional[List[Dict[str, Any]]] = None,
        recording_url: Optional[str] = None,
    ) -> EnqueueOutcome:
        """
        Store a completed call's transcript and queue the interview for scoring.

        The update is skipped when an attempt is already queued or claimed, or when
        the same external call already produced a completed evaluation.
        """
        with self.session_scope() as session:
            row = session.query(DBInterview.id).filter(DBInterview.slug == slug).first()
            if row is None:
                return EnqueueOutcome(EnqueueStatus.NOT_FOUND)
            interview_id = row.id

            conditions = [
                DBInterview.id == interview_id,
                DBInterview.evaluation_status.notin_([s.value for s in IN_FLIGHT_STATUSES]),
            ]
            if external_call_id:
                conditions.append(
                    or_(
                        DBInterview.external_call_id.is_(None),
                        DBInterview.external_call_id != external_call_id,
                        DBInterview.evaluation_status != EvaluationStatus.COMPLETED.value,
                    )
                )

            now = _now()
            values: Dict[Any, Any] = {
                DBInterview.transcript: {"text": transcript_text, "messages": messages or []},
                DBInterview.external_call_id: external_call_id,
                DBInterview.status: case(
                    (DBInterview.status.in_(_CALL_NOT_ENDED), InterviewStatus.COMPLETED.value),
                    else_=DBInterview.status,
                ),
                DBInterview.completed_at: now,
                DBInterview.evaluation_status: EvaluationStatus.QUEUED.value,
                DBInterview.queued_at: now,
                DBInterview.evaluation_error: None,
            }
            if recording_url:
                values[DBInterview.recording_url] = recording_url

            updated = session.query(DBInterview).filter(*conditions).update(values, synchronize_session=False)
            if updated == 1:
                logger.info(
                    "interview_queued",
                    extra={"interview_id": interview_id, "slug": slug, "call_id": external_call_id},
                )
                return EnqueueOutcome(EnqueueStatus.QUEUED, interview_id)

            current = session.query(DBInterview.evaluation_status).filter(DBInterview.id == interview_id).scalar()
            if current in {s.value for s in IN_FLIGHT_STATUSES}:
                return EnqueueOutcome(EnqueueStatus.IN_FLIGHT, interview_id)
            return EnqueueOutcome(EnqueueStatus.DUPLICATE, interview_id)

    def oldest_queued_interview_id(self) -> Optional[str]:
        with self.session_scope() as session:
            row = (
                session.query(DBInterview.id)
                .filter(DBInterview.evaluation_status == EvaluationStatus.QUEUED.value)
                .order_by(DBInterview.queued_at, DBInterview.created_at)
                .first()
            )
            return row.id if row else None

    def try_claim(
        self,
        interview_id: str,
        expected: Iterable[EvaluationStatus] = (EvaluationStatus.QUEUED,),
    ) -> bool:
        """
        Compare-and-swap the interview into ``claimed``.

        Succeeds only if the row's evaluation_status is still one of ``expected``
        at the moment of the UPDATE. Each successful claim starts a new attempt.
        """
        expected_values = [EvaluationStatus(s).value for s in expected]
        with self.session_scope() as session:
            updated = (
                session.query(DBInterview)
                .filter(
                    DBInterview.id == interview_id,
                    DBInterview.evaluation_status.in_(expected_values),
                )
                .update(
                    {
                        DBInterview.evaluation_status: EvaluationStatus.CLAIMED.value,
                        DBInterview.evaluation_attempt: DBInterview.evaluation_attempt + 1,
                        DBInterview.claimed_at: _now(),
                        DBInterview.evaluation_error: None,
                    },
                    synchronize_session=False,
                )
            )

        if updated == 1:
            logger.info("interview_claimed", extra={"interview_id": interview_id})
            return True
        logger.info(
            "interview_claim_lost",
            extra={"interview_id": interview_id, "expected": expected_values},
        )
        return False

    def claim_next_queued(self) -> Optional[str]:
        """Claim the single oldest queued interview; ``None`` if nothing is queued or the race was lost."""
        interview_id = self.oldest_queued_interview_id()
        if interview_id is None:
            return None
        return interview_id if self.try_claim(interview_id) else None

    def record_question_evaluation(
        self,
        *,
        interview_id: str,
        attempt: int,
        pair: QAPair,
        result: QuestionScore,
        degraded: bool = False,
    ) -> None:
        with self.session_scope() as session:
            session.add(
                DBQuestionEvaluation(
                    interview_id=interview_id,
                    question_id=pair.question_id,
                    competency_id=pair.competency.id if pair.competency else None,
                    attempt=attempt,
                    score=result.score,
                    strengths=result.strengths,
                    concerns=result.concerns,
                    evidence_quotes=result.evidence_quotes,
                    why_not_higher_score=result.why_not_higher_score,
                    degraded=degraded,
                )
            )

    def record_screening_summary(self, *, interview_id: str, attempt: int, answer: ScreeningAnswer) -> None:
        with self.session_scope() as session:
            session.add(
                DBScreeningSummary(
                    interview_id=interview_id,
                    question_id=answer.question_id,
                    attempt=attempt,
                    raw_answer=answer.raw_answer,
                    summary=answer.summary,
                    duration_seconds=answer.duration_seconds,
                )
            )

    def complete_evaluation(
        self,
        *,
        interview_id: str,
        attempt: int,
        score: int,
        structured: StructuredEvaluation,
    ) -> None:
        """
        Persist the final result. Only the holder of the current claim may complete.

        Raises:
            PersistenceError: if the interview is no longer claimed by this attempt
        """
        with self.session_scope() as session:
            updated = (
                session.query(DBInterview)
                .filter(
                    DBInterview.id == interview_id,
                    DBInterview.evaluation_status == EvaluationStatus.CLAIMED.value,
                    DBInterview.evaluation_attempt == attempt,
                )
                .update(
                    {
                        DBInterview.score: score,
                        DBInterview.recommendation: structured.recommendation.value,
                        DBInterview.structured_evaluation: structured.model_dump(mode="json"),
                        DBInterview.evaluation_status: EvaluationStatus.COMPLETED.value,
                        DBInterview.evaluation_completed_at: _now(),
                        DBInterview.evaluation_error: None,
                    },
                    synchronize_session=False,
                )
            )

        if updated != 1:
            raise PersistenceError(
                f"Failed to save evaluation results: claim for attempt {attempt} no longer held",
                interview_id=interview_id,
            )
        logger.info(
            "interview_evaluation_completed",
            extra={"interview_id": interview_id, "attempt": attempt, "score": score},
        )

    def mark_failed(self, interview_id: str, message: str, attempt: Optional[int] = None) -> bool:
        conditions = [
            DBInterview.id == interview_id,
            DBInterview.evaluation_status == EvaluationStatus.CLAIMED.value,
        ]
        if attempt is not None:
            conditions.append(DBInterview.evaluation_attempt == attempt)

        with self.session_scope() as session:
            updated = (
                session.query(DBInterview)
                .filter(*conditions)
                .update(
                    {
                        DBInterview.evaluation_status: EvaluationStatus.FAILED.value,
                        DBInterview.evaluation_error: truncate_error(message or "Unknown error"),
                    },
                    synchronize_session=False,
                )
            )
        if updated != 1:
            logger.warning("interview_mark_failed_skipped", extra={"interview_id": interview_id})
        return updated == 1

    # Operator queue

    def list_failed_interviews(self) -> List[InterviewSnapshot]:
        """Failed evaluations plus ended calls that never received an evaluation."""
        with self.session_scope() as session:
            failed = (
                session.query(DBInterview)
                .filter(DBInterview.evaluation_status == EvaluationStatus.FAILED.value)
                .order_by(DBInterview.completed_at.desc())
                .all()
            )
            missing = (
                session.query(DBInterview)
                .filter(
                    DBInterview.status == InterviewStatus.COMPLETED.value,
                    DBInterview.structured_evaluation.is_(None),
                    DBInterview.evaluation_status.notin_(
                        [
                            EvaluationStatus.QUEUED.value,
                            EvaluationStatus.CLAIMED.value,
                            EvaluationStatus.COMPLETED.value,
                        ]
                    ),
                )
                .order_by(DBInterview.completed_at.desc())
                .all()
            )

            seen = set()
            snapshots: List[InterviewSnapshot] = []
            for db_interview in failed + missing:
                if db_interview.id in seen:
                    continue
                seen.add(db_interview.id)
                snapshots.append(self._to_snapshot(db_interview))
            return snapshots

    # Error logs

    def insert_error_log(self, entry: ErrorLogEntry) -> int:
        with self.session_scope() as session:
            db_entry = DBErrorLog(
                endpoint=entry.endpoint,
                error_type=entry.error_type,
                error_message=entry.error_message,
                error_stack=entry.error_stack,
                interview_id=entry.interview_id,
                interview_slug=entry.interview_slug,
                candidate_id=entry.candidate_id,
                request_body=entry.request_body,
            )
            session.add(db_entry)
            session.flush()
            return db_entry.id

    def list_error_logs(self, interview_id: Optional[str] = None) -> List[ErrorLogEntry]:
        with self.session_scope() as session:
            query = session.query(DBErrorLog)
            if interview_id:
                query = query.filter_by(interview_id=interview_id)
            return [self._to_error_entry(row) for row in query.order_by(DBErrorLog.id).all()]

    def list_unresolved_errors(self, limit: int = 20) -> List[ErrorLogEntry]:
        with self.session_scope() as session:
            rows = (
                session.query(DBErrorLog)
                .filter(DBErrorLog.resolved_at.is_(None))
                .order_by(DBErrorLog.created_at.desc(), DBErrorLog.id.desc())
                .limit(limit)
                .all()
            )
            return [self._to_error_entry(row) for row in rows]

    def resolve_error(self, error_id: int, notes: Optional[str] = None) -> Optional[ErrorLogEntry]:
        with self.session_scope() as session:
            row = session.query(DBErrorLog).filter_by(id=error_id).first()
            if not row:
                return None
            row.resolved_at = _now()
            row.resolution_notes = notes or "Marked as resolved"
            session.flush()
            return self._to_error_entry(row)

    # Utility Methods

    @staticmethod
    def _split_transcript(raw: Any) -> tuple:
        if raw is None:
            return "", []
        if isinstance(raw, str):
            return raw, []
        text = raw.get("text") or ""
        messages = raw.get("messages") or []
        if not text.strip() and messages:
            text = render_transcript_messages(messages)
        return text, messages

    def _to_snapshot(self, db_interview: DBInterview) -> InterviewSnapshot:
        text, messages = self._split_transcript(db_interview.transcript)
        return InterviewSnapshot(
            id=db_interview.id,
            slug=db_interview.slug,
            role_id=db_interview.role_id,
            candidate_id=db_interview.candidate_id,
            status=db_interview.status,
            evaluation_status=db_interview.evaluation_status,
            evaluation_attempt=db_interview.evaluation_attempt or 0,
            external_call_id=db_interview.external_call_id,
            transcript_text=text,
            transcript_messages=messages,
            recording_url=db_interview.recording_url,
            score=db_interview.score,
            recommendation=db_interview.recommendation,
            structured_evaluation=db_interview.structured_evaluation,
            evaluation_error=db_interview.evaluation_error,
            created_at=db_interview.created_at,
            completed_at=db_interview.completed_at,
        )

    @staticmethod
    def _to_error_entry(row: DBErrorLog) -> ErrorLogEntry:
        return ErrorLogEntry(
            id=row.id,
            endpoint=row.endpoint,
            error_type=row.error_type,
            error_message=row.error_message,
            error_stack=row.error_stack,
            interview_id=row.interview_id,
            interview_slug=row.interview_slug,
            candidate_id=row.candidate_id,
            request_body=row.request_body,
            created_at=row.created_at,
            resolved_at=row.resolved_at,
            resolution_notes=row.resolution_notes,
        )


_store_instance: Optional[InterviewStore] = None


def get_interview_store() -> InterviewStore:
    global _store_instance
    if _store_instance is None:
        _store_instance = InterviewStore()
    return _store_instance
