# segmenter.py
"""Aligns transcript text to the role's ordered questions."""

import logging
from typing import Any, Dict, List, Optional, Union

from evaluation_config import SEGMENTATION_MODEL
from evaluation_errors import TextGenerationError
from evaluation_models import QAPair, Question
from text_generation import TextGenerationClient

from .outcomes import Fatal, Ok
from .prompts import SEGMENTATION_SYSTEM_PROMPT, build_segmentation_prompt

logger = logging.getLogger(__name__)


def _as_index(value: Any, question_count: int) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        return None
    if value < 0 or value >= question_count:
        return None
    return value


def parse_segmentation(data: Dict[str, Any], questions: List[Question]) -> Union[Ok[List[QAPair]], Fatal]:
    """
    Validate a ``{"qa_pairs": [...]}`` reply and map it onto ``questions``.

    Entries with an invalid index or a non-string answer are dropped; the first
    entry wins for a repeated index. Questions left without an entry get "".
    """
    entries = data.get("qa_pairs")
    if not isinstance(entries, list):
        return Fatal("Invalid response format: missing qa_pairs array")

    answers: Dict[int, str] = {}
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning("segmentation_entry_dropped", extra={"position": position, "reason": "not_an_object"})
            continue

        index = _as_index(entry.get("question_index"), len(questions))
        if index is None:
            logger.warning(
                "segmentation_entry_dropped",
                extra={"position": position, "reason": "invalid_index", "value": entry.get("question_index")},
            )
            continue

        answer = entry.get("answer")
        if not isinstance(answer, str):
            logger.warning("segmentation_entry_dropped", extra={"position": position, "reason": "invalid_answer"})
            continue

        if index in answers:
            logger.warning("segmentation_entry_dropped", extra={"position": position, "reason": "duplicate_index"})
            continue

        answers[index] = answer.strip()

    if not answers:
        return Fatal("No valid question/answer pairs could be extracted from the transcript")

    pairs = [
        QAPair(
            question_id=question.id,
            question=question.text,
            answer=answers.get(index, ""),
            type=question.type,
            competency=question.competency,
        )
        for index, question in enumerate(questions)
    ]
    return Ok(pairs)


class TranscriptSegmenter:
    def __init__(self, text_client: TextGenerationClient, *, model: str = SEGMENTATION_MODEL) -> None:
        self.text_client = text_client
        self.model = model

    def segment(self, questions: List[Question], transcript: str) -> Union[Ok[List[QAPair]], Fatal]:
        if not questions:
            return Fatal("No questions configured for this role")
        if not transcript or not transcript.strip():
            return Fatal("Transcript is empty")

        try:
            data = self.text_client.generate_json(
                model=self.model,
                system=SEGMENTATION_SYSTEM_PROMPT,
                user=build_segmentation_prompt([q.text for q in questions], transcript),
            )
        except TextGenerationError as exc:
            logger.error("segmentation_failed", extra={"error": exc.message}, exc_info=True)
            return Fatal(f"Failed to extract answers from transcript: {exc.message}", exc)

        outcome = parse_segmentation(data, questions)
        if isinstance(outcome, Ok):
            answered = sum(1 for pair in outcome.value if pair.answer)
            logger.info(
                "segmentation_completed",
                extra={"question_count": len(questions), "answered_count": answered},
            )
        return outcome
