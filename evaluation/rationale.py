# rationale.py
"""Short natural-language explanation of the recommendation. Never fatal."""

import logging
from typing import Union

from evaluation_config import RATIONALE_MODEL
from evaluation_errors import TextGenerationError
from evaluation_models import Recommendation
from text_generation import TextGenerationClient

from .aggregator import AggregateResult
from .decision_policy import FALLBACK_RATIONALE_TEMPLATE, RATIONALE_EVIDENCE_LIMIT
from .outcomes import Degraded, Ok
from .prompts import (
    RATIONALE_SYSTEM_PROMPT,
    build_borderline_rationale_prompt,
    build_rationale_prompt,
)

logger = logging.getLogger(__name__)


def fallback_rationale(recommendation: Recommendation) -> str:
    return FALLBACK_RATIONALE_TEMPLATE.format(recommendation=Recommendation(recommendation).value)


class RationaleGenerator:
    def __init__(self, text_client: TextGenerationClient, *, model: str = RATIONALE_MODEL) -> None:
        self.text_client = text_client
        self.model = model

    def build_prompt(self, aggregate: AggregateResult, role_title: str) -> str:
        strengths = aggregate.strengths[:RATIONALE_EVIDENCE_LIMIT]
        concerns = aggregate.concerns[:RATIONALE_EVIDENCE_LIMIT]
        if aggregate.recommendation == Recommendation.BORDERLINE:
            return build_borderline_rationale_prompt(
                role_title=role_title,
                overall_score=aggregate.overall_score,
                triggers=aggregate.triggers,
                strengths=strengths,
                concerns=concerns,
            )
        return build_rationale_prompt(
            recommendation=aggregate.recommendation.value,
            role_title=role_title,
            competencies=aggregate.competency_names,
            overall_score=aggregate.overall_score,
            strengths=strengths,
            concerns=concerns,
            triggers=aggregate.triggers,
        )

    def generate(self, aggregate: AggregateResult, role_title: str) -> Union[Ok[str], Degraded[str]]:
        fallback = fallback_rationale(aggregate.recommendation)
        try:
            text = self.text_client.generate_text(
                model=self.model,
                system=RATIONALE_SYSTEM_PROMPT,
                user=self.build_prompt(aggregate, role_title),
                temperature=0.7,
            )
        except TextGenerationError as exc:
            logger.warning("rationale_generation_failed", extra={"error": exc.message})
            return Degraded(fallback, exc.message, error_type=exc.error_type)

        if not text:
            return Degraded(fallback, "Empty rationale returned", error_type="empty_rationale")
        return Ok(text)
