"""Questionnaire content shown by the Streamlit client."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

PROMPT = "Over the last 2 weeks, how often have you been bothered by this?"


@dataclass(frozen=True)
class Question:
    id: int
    text: str
    description: Optional[str] = PROMPT


QUESTIONS: List[Question] = [
    Question(1, "Little interest or pleasure in doing things"),
    Question(2, "Feeling down, depressed, or hopeless"),
    Question(3, "Trouble falling or staying asleep, or sleeping too much"),
    Question(4, "Feeling tired or having little energy"),
    Question(5, "Poor appetite or overeating"),
    Question(6, "Feeling bad about yourself or that you are a failure"),
    Question(7, "Trouble concentrating on things, such as reading or watching TV"),
    Question(8, "Moving or speaking slowly, or being fidgety or restless"),
    Question(9, "Thoughts that you would be better off dead or hurting yourself"),
]

RESPONSE_OPTIONS = {
    1: "Not at all",
    2: "Several days",
    3: "More than half the days",
    4: "Nearly every day",
    5: "Every day",
}
