"""Sequential replay of a competition table through a recursive rule"""
import logging
import math
import warnings
from dataclasses import dataclass, field
from typing import Iterator, Optional
import numpy as np
import polars as pl
from ratpack.core.base import UpdateRule, RuleInfo, Computation, StateModel
from ratpack.core.exceptions import InvalidParameterError, RecordingOverflowWarning
from ratpack.models.elo import Elo
from ratpack.utils.data_utils import RatingsList, RatingsTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Iterate(UpdateRule):
    """
    Update by iterating another recursive rule over consecutive batches of competitions.

    The rows are split in order into windows of batch_size (the last may be shorter), each
    window is passed to the sub-rule and its output is the input ratings for the next window.
    With batch_size=1 and Elo this is the usual sequential Elo.

    Parameters:
        rule (UpdateRule): the recursive rule to use at each iteration. Defaults to Elo().
        batch_size (int): the number of competitions in each batch. Defaults to 1.
    """

    rule: UpdateRule = field(default_factory=Elo)
    batch_size: int = 1

    def __post_init__(self):
        if not isinstance(self.rule, UpdateRule):
            raise InvalidParameterError(f'{self.name}: rule must be an UpdateRule, got {self.rule!r}')
        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, (int, np.integer)):
            raise InvalidParameterError(f'{self.name}: batch_size must be an integer, got {self.batch_size!r}')
        if self.batch_size < 1:
            raise InvalidParameterError(f'{self.name}: batch_size must be at least 1, got {self.batch_size}')
        if self.rule.info().state_model != StateModel.RECURSIVE:
            raise InvalidParameterError(
                f'{self.name}: the sub-rule {self.rule.name} is not recursive, iterating it has no effect'
            )

    def own_parameters(self):
        return ('rule (default=Elo)', 'batch_size (default=1)')

    def info(self) -> RuleInfo:
        sub_info = self.rule.info()
        return RuleInfo(
            name=self.name,
            reference='none',
            computation=Computation.SEQUENTIAL,
            state_model=StateModel.RECURSIVE,
            input=sub_info.input,
            output=sub_info.output,
            model=sub_info.model,
            ties=sub_info.ties,
            factors=sub_info.factors,
            parameters=self.own_parameters() + tuple(sub_info.parameters),
            record=True,
        )

    def batches(self, competitions: pl.DataFrame) -> Iterator[pl.DataFrame]:
        """consecutive non-overlapping windows of batch_size rows"""
        for start in range(0, competitions.height, self.batch_size):
            yield competitions.slice(start, self.batch_size)

    def update_ratings(
        self,
        input_ratings: RatingsList,
        input_competitions: pl.DataFrame,
        record: Optional[RatingsTable] = None,
    ) -> RatingsList:
        """
        Replay the competitions batch by batch.

        Parameters:
            input_ratings (RatingsList): the starting ratings, never modified
            input_competitions (pl.DataFrame): the competitions in the order to replay them
            record (RatingsTable, optional): the ratings after batch j are written to slot j while
                                             there is space, later batches warn with
                                             RecordingOverflowWarning but still run
        """
        ratings = input_ratings.copy()
        step = -1
        for step, batch in enumerate(self.batches(input_competitions)):
            ratings = self.rule.update_ratings(ratings, batch)
            logger.debug('%s: batch %d of %d rows done', self.name, step, batch.height)
            if record is None:
                continue
            if step < record.capacity:
                record[step] = ratings
            else:
                warnings.warn(
                    f'{self.name}: out of space to record ratings, batch {step + 1} '
                    f'with a table of capacity {record.capacity}',
                    RecordingOverflowWarning,
                )
        if step < 0:
            # no batches, let the sub-rule seed unrated players
            return self.rule.update_ratings(ratings, input_competitions)
        return ratings

    def predict_outcome(self, rating_a, rating_b, factor_a=None, factor_b=None):
        return self.rule.predict_outcome(rating_a, rating_b, factor_a, factor_b)


@dataclass(frozen=True)
class SampleIterate(Iterate):
    """
    Iterate over batches sampled uniformly with replacement from the competitions.

    Parameters:
        rule (UpdateRule): the recursive rule to use at each iteration. Defaults to Elo().
        batch_size (int): the number of competitions in each batch. Defaults to 1.
        n_batches (int, optional): the number of batches, defaults to ceil(n / batch_size)
                                   so that n rows are sampled in total.
        seed (int): seed of the random generator, the same seed gives the same batches. Defaults to 0.
    """

    n_batches: Optional[int] = None
    seed: int = 0

    def __post_init__(self):
        super().__post_init__()
        if self.n_batches is not None and (
            isinstance(self.n_batches, bool) or not isinstance(self.n_batches, (int, np.integer))
        ):
            raise InvalidParameterError(f'{self.name}: n_batches must be an integer, got {self.n_batches!r}')
        if self.n_batches is not None and self.n_batches < 1:
            raise InvalidParameterError(f'{self.name}: n_batches must be at least 1, got {self.n_batches}')

    def own_parameters(self):
        return (
            'rule (default=Elo)',
            'batch_size (default=1)',
            'n_batches (default=ceil(n/batch_size))',
            'seed (default=0)',
        )

    def batches(self, competitions: pl.DataFrame) -> Iterator[pl.DataFrame]:
        num_rows = competitions.height
        if num_rows == 0:
            return
        n_batches = self.n_batches or math.ceil(num_rows / self.batch_size)
        rng = np.random.default_rng(seed=self.seed)
        for _ in range(n_batches):
            rows = rng.integers(low=0, high=num_rows, size=self.batch_size)
            yield competitions.select(pl.all().gather(rows))
