# prompts.py
"""Prompt text for the segmentation, scoring, summary and rationale calls."""

from typing import Dict, List, Optional

SEGMENTATION_SYSTEM_PROMPT = """
Extract the candidate's answers to each interview question from the transcript.

Return ONLY valid JSON in this format:
{
  "qa_pairs": [
    {
      "question_index": 0,
      "answer": "The candidate's full answer to this question"
    }
  ]
}

Match questions by semantic similarity. If a question wasn't answered, use empty string for answer.
""".strip()

RUBRIC_SYSTEM_PROMPT = """
You are an expert interviewer evaluating a candidate's answer against a BARS (Behaviorally Anchored Rating Scale) rubric.

Evaluate the answer objectively based on:
- Concrete behaviors and examples provided
- Evidence of the competency in action
- Depth and quality of the response

Return ONLY valid JSON:
{
  "score": 1-4,
  "strengths": ["Specific strength 1", "Specific strength 2"],
  "concerns": ["Specific concern 1", "Specific concern 2"],
  "evidence_quotes": ["Direct quote from answer that supports score"],
  "why_not_higher_score": "Specific explanation of what would be needed for the next level"
}

Focus on observable behaviors, not assumptions about the person.
""".strip()

SUMMARY_SYSTEM_PROMPT = "Summarize the candidate's answer in 1-2 concise sentences. Focus on key facts only."

RATIONALE_SYSTEM_PROMPT = (
    "You are a hiring expert. Write clear, concise explanations for hiring recommendations that "
    "directly connect candidate performance to job requirements. Focus on how they will perform in "
    "the actual role responsibilities. Write in 2-3 sentences."
)


def build_segmentation_prompt(questions: List[str], transcript: str) -> str:
    numbered = "\n".join(f"{index}. {text}" for index, text in enumerate(questions))
    return f"Questions:\n{numbered}\n\nTranscript:\n{transcript}"


def _format_rubric(rubric: Dict[int, str]) -> str:
    if not rubric:
        return "(no rubric anchors provided)"
    return "\n".join(f"{level}: {anchor}" for level, anchor in sorted(rubric.items()))


def build_rubric_prompt(
    *,
    competency_name: str,
    competency_description: str,
    rubric: Dict[int, str],
    job_context: str,
    question: str,
    answer: str,
) -> str:
    return (
        f"Competency: {competency_name}\n"
        f"Description: {competency_description}\n\n"
        "BARS Rubric:\n"
        f"{_format_rubric(rubric)}\n\n"
        "Job Context:\n"
        f"{job_context}\n\n"
        f"Question: {question}\n\n"
        f"Candidate's Answer: {answer}\n\n"
        "Evaluate this answer:"
    )


def build_summary_prompt(question: str, answer: str) -> str:
    return f"Question: {question}\n\nAnswer: {answer}\n\nProvide a brief summary:"


def _joined(items: List[str]) -> str:
    return "; ".join(items) or "None identified"


def build_borderline_rationale_prompt(
    *,
    role_title: str,
    overall_score: int,
    triggers: List[str],
    strengths: List[str],
    concerns: List[str],
) -> str:
    return (
        "Based on this interview evaluation, write a 2-3 sentence explanation for why this candidate "
        "is BORDERLINE and requires human review.\n\n"
        f"Role: {role_title}\n"
        f"Weighted Score: {overall_score}%\n"
        f"Borderline Triggers: {'; '.join(triggers) or 'Score fell in borderline range'}\n\n"
        f"Key Strengths: {_joined(strengths)}\n"
        f"Key Concerns: {_joined(concerns)}\n\n"
        "Write a balanced rationale that:\n"
        "1. Acknowledges what the candidate did well\n"
        "2. Explains the specific concerns or inconsistencies\n"
        "3. Suggests what a human reviewer should focus on"
    )


def build_rationale_prompt(
    *,
    recommendation: str,
    role_title: str,
    competencies: List[str],
    overall_score: int,
    strengths: List[str],
    concerns: List[str],
    triggers: Optional[List[str]] = None,
) -> str:
    flags = f"Review Flags: {'; '.join(triggers)}\n" if triggers else ""
    return (
        "Based on this interview evaluation, write a 2-3 sentence explanation of WHY we recommend "
        f"\"{recommendation}\" for this candidate.\n\n"
        f"Role: {role_title}\n"
        f"Competencies Evaluated: {', '.join(competencies)}\n"
        f"Weighted Score: {overall_score}%\n"
        f"{flags}\n"
        f"Key Strengths: {_joined(strengths)}\n"
        f"Key Concerns: {_joined(concerns)}\n\n"
        "Write a concise, specific rationale that connects their competency performance to the role requirements."
    )
