"""scoring rules for judging the predictions of a rating rule against observed outcomes"""

import numpy as np
import polars as pl
from ratpack.core.base import UpdateRule
from ratpack.core.exceptions import UndefinedRuleError, PlayerNotFoundError
from ratpack.utils.constants import PLAYER_A, PLAYER_B, OUTCOME, FACTOR_A, FACTOR_B, LOG_EPS
from ratpack.utils.data_utils import RatingsList, validate_competitions
from ratpack.utils.math_utils import outcome_class


class ScoringRule:
    """
    Base class for scoring rules.

    A scoring rule maps a vector of predicted class probabilities and the observed class
    (1-based) to a real score. direction is +1 when larger scores are better and -1 when
    scores closer to zero are better.
    """

    direction = 0

    @property
    def name(self) -> str:
        return type(self).__name__

    def score(self, probs: np.ndarray, outcome: int) -> float:
        raise UndefinedRuleError(f'undefined scoring rule {self.name}')


class Brier(ScoringRule):
    """squared distance between the predictions and the indicator of the outcome"""

    direction = -1

    def score(self, probs, outcome):
        target = np.zeros_like(probs)
        target[outcome - 1] = 1.0
        return float(np.square(probs - target).sum())


class Logarithmic(ScoringRule):
    """log of the probability given to the outcome, clipped away from log(0)"""

    direction = 1

    def score(self, probs, outcome):
        return float(np.log(max(probs[outcome - 1], LOG_EPS)))


class Quadratic(ScoringRule):
    """2 p_o - sum(p^2)"""

    direction = 1

    def score(self, probs, outcome):
        return float(2.0 * probs[outcome - 1] - np.square(probs).sum())


class Spherical(ScoringRule):
    """probability of the outcome over the euclidean norm of the predictions"""

    direction = 1

    def score(self, probs, outcome):
        norm = np.linalg.norm(probs)
        if norm == 0.0:
            return 0.0
        return float(probs[outcome - 1] / norm)


scoring_rule_list = {
    'Brier': Brier,
    'Logarithmic': Logarithmic,
    'Quadratic': Quadratic,
    'Spherical': Spherical,
}
scoring_rule_names = [f'Score{name}' for name in scoring_rule_list]


def scoring_function(srule: ScoringRule, predicted_probabilities, outcome: int) -> float:
    """
    Compute the score of predicted probabilities for one observed outcome.

    Parameters:
        srule (ScoringRule): the scoring rule to use
        predicted_probabilities (sequence of float): probabilities of each of the C classes of outcome
        outcome (int): the observed class, from 1 to C
    """
    probs = np.asarray(predicted_probabilities, dtype=np.float64)
    if probs.ndim != 1:
        raise ValueError(f'predicted probabilities must be a vector, got shape {probs.shape}')
    if not 1 <= outcome <= probs.shape[0]:
        raise ValueError(f'outcome must be in 1..{probs.shape[0]}, got {outcome}')
    return srule.score(probs, outcome)


def score_direction(srule: ScoringRule) -> int:
    """+1 when larger scores are better, -1 when scores closer to zero are better"""
    if srule.direction not in (1, -1):
        raise UndefinedRuleError(f'undefined scoring rule {srule.name}')
    return srule.direction


def _column_or_none(df: pl.DataFrame, col: str) -> list:
    if col not in df.columns:
        return [None] * df.height
    return df[col].to_list()


def score_ratings(srule: ScoringRule, outcomes: pl.DataFrame, rule: UpdateRule, ratings: RatingsList) -> float:
    """
    Average score of a rule's predictions over a table of competitions.

    Parameters:
        srule (ScoringRule): the scoring rule to use
        outcomes (pl.DataFrame): the competitions to predict
        rule (UpdateRule): the update rule whose predict_outcome is used
        ratings (RatingsList): ratings of every player in outcomes, typically fitted with the same rule
    """
    validate_competitions(outcomes)
    if outcomes.height == 0:
        raise ValueError('cannot score an empty table of outcomes')

    rows = zip(
        outcomes[PLAYER_A].to_list(),
        outcomes[PLAYER_B].to_list(),
        outcomes[OUTCOME].to_list(),
        _column_or_none(outcomes, FACTOR_A),
        _column_or_none(outcomes, FACTOR_B),
    )
    total_score = 0.0
    for row, (player_a, player_b, outcome, factor_a, factor_b) in enumerate(rows):
        rating_a = ratings.get(player_a)
        rating_b = ratings.get(player_b)
        for player, rating in ((player_a, rating_a), (player_b, rating_b)):
            if rating is None:
                raise PlayerNotFoundError(player, rule_name=rule.name, row=row)
        out_prob = rule.predict_outcome(rating_a, rating_b, factor_a, factor_b)
        total_score += scoring_function(srule, out_prob, outcome_class(outcome))
    return total_score / outcomes.height
