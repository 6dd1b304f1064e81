"""Reversion of ratings toward a default, e.g. between seasons"""
from dataclasses import dataclass
import polars as pl
from ratpack.core.base import UpdateRule, RuleInfo, Computation, StateModel, InputType, OutputType
from ratpack.core.exceptions import InvalidParameterError
from ratpack.utils.constants import DEFAULT_R0
from ratpack.utils.data_utils import RatingsList


@dataclass(frozen=True)
class Revert(UpdateRule):
    """
    Pull every rating part of the way back to r0, ignoring the competitions.

    new rating = (1 - fraction) * rating + fraction * r0

    Parameters:
        r0 (float): the rating to revert toward, also given to unrated players. Defaults to 1500.0.
        fraction (float): the share of the gap to r0 that is removed, in [0, 1]. Defaults to 0.25.
    """

    r0: float = DEFAULT_R0
    fraction: float = 0.25

    def __post_init__(self):
        if not self.r0 >= 0.0:
            raise InvalidParameterError(f'{self.name}: r0 must be non-negative, got {self.r0}')
        if not 0.0 <= self.fraction <= 1.0:
            raise InvalidParameterError(f'{self.name}: fraction must be in [0, 1], got {self.fraction}')

    def info(self) -> RuleInfo:
        return RuleInfo(
            name='Revert',
            reference='none',
            computation=Computation.SIMULTANEOUS,
            state_model=StateModel.RECURSIVE,
            input=InputType.NONE,
            output=OutputType.DETERMINISTIC,
            ties=False,
            factors=False,
            parameters=('r0, rating reverted toward', 'fraction, share of the gap to r0 removed'),
        )

    def update_ratings(self, input_ratings: RatingsList, input_competitions: pl.DataFrame) -> RatingsList:
        old_ratings = input_ratings.with_defaults(self.r0)
        keep = 1.0 - self.fraction
        new_r = {
            player: keep * rating + self.fraction * self.r0 for player, rating in old_ratings.ratings.items()
        }
        return RatingsList(old_ratings.players, new_r)
