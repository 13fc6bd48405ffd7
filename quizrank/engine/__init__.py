"""Core scoring and ranking engine."""

from .promotion import PromotionEngine
from .quiz import QuizScorer, score_quiz_results
from .ranker import Ranker, RankingConfig

__all__ = [
    "PromotionEngine",
    "QuizScorer",
    "Ranker",
    "RankingConfig",
    "score_quiz_results",
]
