"""Heuristic quality score for generated text.

Best-effort signal only: nothing here is learned or calibrated.
"""

from typing import Dict, Optional, Tuple

BASELINE_SCORE = 0.5
LENGTH_BONUS = 0.1
STRUCTURE_BONUS = 0.1
KEYWORD_BONUS = 0.05
MAX_KEYWORD_BONUS = 0.3
MIN_LENGTH = 100
MAX_LENGTH = 5000

TASK_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "brand": ("brand", "identity", "values", "positioning", "audience"),
    "design": ("design", "visual", "layout", "color", "typography"),
    "development": ("code", "function", "implementation", "technical"),
    "content": ("content", "message", "copy", "text"),
    "analysis": ("analysis", "data", "insight", "metrics"),
    "optimization": ("optimize", "improve", "enhance", "performance"),
}


def count_keyword_matches(content: str, task_type: Optional[str]) -> int:
    lowered = content.lower()
    return sum(1 for keyword in TASK_KEYWORDS.get(task_type or "", ()) if keyword in lowered)


def estimate_quality_score(content: str, task_type: Optional[str]) -> float:
    score = BASELINE_SCORE

    if MIN_LENGTH < len(content) < MAX_LENGTH:
        score += LENGTH_BONUS

    # Newlines plus hyphens stand in for paragraphs and lists
    if "\n" in content and "-" in content:
        score += STRUCTURE_BONUS

    score += min(count_keyword_matches(content, task_type) * KEYWORD_BONUS, MAX_KEYWORD_BONUS)

    return min(score, 1.0)
