"""The Elo rating system with a configurable performance model"""
from dataclasses import dataclass, field
from typing import Any
import numpy as np
import polars as pl
from scipy.stats import logistic
from ratpack.core.base import (
    UpdateRule,
    RuleInfo,
    Computation,
    StateModel,
    InputType,
    OutputType,
)
from ratpack.core.exceptions import InvalidParameterError
from ratpack.utils.constants import DEFAULT_R0, DEFAULT_K, DEFAULT_THETA, PLAYER_A, PLAYER_B, OUTCOME, FACTOR_A, FACTOR_B
from ratpack.utils.data_utils import RatingsList, validate_competitions, competition_players, optional_column
from ratpack.utils.math_utils import encode_outcome, coalesce


@dataclass(frozen=True)
class Elo(UpdateRule):
    """
    Standard Elo where K is constant but the performance distribution can be chosen.

    All updates in one call are computed from the ratings as they stood before the call
    and applied together. Sequential Elo is obtained by wrapping the rule in Iterate.

    Parameters:
        r0 (float): default rating given to players without one. Defaults to 1500.0.
        k (float): the gain. Defaults to 32.0.
        dist (optional): the performance model, any object with a cdf method such as a frozen
                         scipy.stats distribution. Defaults to Logistic(0, theta).
        theta (float): scale of the default logistic performance model. Defaults to 400 / ln(10),
                       the usual chess scale.

    Rules built from theta compare by theta, rules given a dist compare by the identity of that dist.
    """

    r0: float = DEFAULT_R0
    k: float = DEFAULT_K
    dist: Any = field(default=None, compare=False)
    theta: float = DEFAULT_THETA
    dist_key: Any = field(default=None, init=False, repr=False)

    uses_factors = False

    def __post_init__(self):
        if not self.k >= 0.0:
            raise InvalidParameterError(f'{self.name}: K must be non-negative, got {self.k}')
        if not self.r0 >= 0.0:
            raise InvalidParameterError(f'{self.name}: r0 must be non-negative, got {self.r0}')
        if self.dist is None:
            if not self.theta > 0.0:
                raise InvalidParameterError(f'{self.name}: theta must be positive, got {self.theta}')
            object.__setattr__(self, 'dist', logistic(loc=0.0, scale=self.theta))
        elif not hasattr(self.dist, 'cdf'):
            raise InvalidParameterError(f'{self.name}: dist must provide a cdf method')
        else:
            object.__setattr__(self, 'dist_key', self.dist)

    def info(self) -> RuleInfo:
        return RuleInfo(
            name='Elo',
            reference='"Who\'s #1", Langville and Meyer, ch. 5',
            computation=Computation.SIMULTANEOUS,
            state_model=StateModel.RECURSIVE,
            input=InputType.OUTCOME,
            output=OutputType.PROBABILISTIC,
            ties=True,
            factors=True,
            parameters=('r0, default rating', 'K, gain', 'dist(), performance model'),
        )

    def predict_outcome(self, rating_a, rating_b, factor_a=None, factor_b=None):
        """
        Probabilities of (A wins, B wins, tie).

        The two win probabilities are evaluated separately so asymmetric performance models
        work, ties are not modelled so the third entry is always 0.0. Missing factors count as 0.
        """
        rating_diff = rating_a - rating_b
        factors = coalesce(factor_a) - coalesce(factor_b)
        expected_a = float(self.dist.cdf(rating_diff + factors))
        expected_b = float(self.dist.cdf(-rating_diff - factors))
        return expected_a, expected_b, 0.0

    def update(self, rating_a, rating_b, outcome, factor_a=None, factor_b=None):
        """rating changes (delta_a, delta_b) for a single competition"""
        expected_a, expected_b, _ = self.predict_outcome(rating_a, rating_b, factor_a, factor_b)
        outcome_a, outcome_b = encode_outcome(outcome)
        delta_a = self.k * (outcome_a - expected_a)
        delta_b = self.k * (outcome_b - expected_b)
        return delta_a, delta_b

    def update_ratings(self, input_ratings: RatingsList, input_competitions: pl.DataFrame) -> RatingsList:
        validate_competitions(input_competitions, rule_name=self.name)
        old_ratings = input_ratings.with_defaults(self.r0, competition_players(input_competitions))
        old_r = old_ratings.ratings
        deltas = dict.fromkeys(old_ratings.players, 0.0)

        if self.uses_factors:
            factors_a = optional_column(input_competitions, FACTOR_A)
            factors_b = optional_column(input_competitions, FACTOR_B)
        else:
            factors_a = factors_b = np.zeros(shape=input_competitions.height)

        rows = zip(
            input_competitions[PLAYER_A].to_list(),
            input_competitions[PLAYER_B].to_list(),
            input_competitions[OUTCOME].to_list(),
            factors_a,
            factors_b,
        )
        for player_a, player_b, outcome, factor_a, factor_b in rows:
            delta_a, delta_b = self.update(old_r[player_a], old_r[player_b], outcome, factor_a, factor_b)
            deltas[player_a] += delta_a
            deltas[player_b] += delta_b

        new_r = {player: old_r[player] + deltas[player] for player in old_ratings.players}
        return RatingsList(old_ratings.players, new_r)


@dataclass(frozen=True)
class EloF(Elo):
    """
    Elo that also uses the per-player factors of each competition, e.g. home advantage.

    The factors are in rating units and shift the rating difference fed to the
    performance model by FactorA - FactorB. Missing factors count as 0.
    """

    uses_factors = True

    def info(self) -> RuleInfo:
        return RuleInfo(
            name='EloF',
            reference='"Who\'s #1", Langville and Meyer, ch. 5',
            computation=Computation.SIMULTANEOUS,
            state_model=StateModel.RECURSIVE,
            input=InputType.OUTCOME,
            output=OutputType.PROBABILISTIC,
            ties=True,
            factors=True,
            parameters=('r0, default rating', 'K, gain', 'dist(), performance model'),
        )
