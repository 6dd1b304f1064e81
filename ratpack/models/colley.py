"""
Colley's method and the Colleyized Massey method
"Who's #1", Langville and Meyer, ch. 3 and p.25
"""
import logging
from dataclasses import dataclass
import numpy as np
import polars as pl
from ratpack.core.base import UpdateRule, RuleInfo, Computation, StateModel, InputType, OutputType
from ratpack.core.exceptions import UndefinedRuleError
from ratpack.utils.constants import OUTCOME
from ratpack.utils.data_utils import (
    RatingsList,
    player_indexes,
    indexed_matchups,
    score_differentials,
    validate_competitions,
)
from ratpack.utils.math_utils import colley_matrix, differential_vector, solve_ratings

logger = logging.getLogger(__name__)


class _ColleySystem(UpdateRule):
    """shared solve for rules using Colley's matrix, subclasses supply the right hand side"""

    def right_hand_side(self, matchups: np.ndarray, competitions: pl.DataFrame, num_players: int) -> np.ndarray:
        raise UndefinedRuleError(f'undefined right hand side for {self.name}')

    def validate(self, competitions: pl.DataFrame):
        validate_competitions(competitions, rule_name=self.name)

    def update_ratings(self, input_ratings: RatingsList, input_competitions: pl.DataFrame) -> RatingsList:
        self.validate(input_competitions)
        players = input_ratings.players
        num_players = len(players)
        if num_players == 0:
            return RatingsList()
        index = player_indexes(players)
        matchups = indexed_matchups(input_competitions, index, rule_name=self.name)

        # 2I + games matrix is symmetric positive definite for any competition graph
        matrix = colley_matrix(matchups, num_players)
        rhs = self.right_hand_side(matchups, input_competitions, num_players)
        logger.debug('%s: solving a %d x %d system', self.name, num_players, num_players)
        ratings = solve_ratings(matrix, rhs, self.name)
        return RatingsList(players, {player: float(ratings[index[player]]) for player in players})


@dataclass(frozen=True)
class Colley(_ColleySystem):
    """
    Colley's win/loss method.

    Solves C r = b where C has 2 plus games played on the diagonal and minus the number
    of meetings off the diagonal, and b = 1 + (wins - losses) / 2. Ties count as neither.
    Ratings average 1/2 whatever the competitions.
    """

    def info(self) -> RuleInfo:
        return RuleInfo(
            name='Colley',
            reference='"Who\'s #1", Langville and Meyer, p.21',
            computation=Computation.SIMULTANEOUS,
            state_model=StateModel.NONE,
            input=InputType.OUTCOME,
            output=OutputType.DETERMINISTIC,
            ties=True,
            factors=False,
        )

    def right_hand_side(self, matchups, competitions, num_players):
        signs = np.sign(competitions[OUTCOME].cast(pl.Float64).fill_null(0.0).to_numpy())
        return 1.0 + differential_vector(matchups, signs / 2.0, num_players)


@dataclass(frozen=True)
class MasseyColley(_ColleySystem):
    """
    The Colleyized Massey method: Colley's matrix with point differentials on the right hand side.

    Has no parameters, ignores past ratings and factors.
    """

    def info(self) -> RuleInfo:
        return RuleInfo(
            name='MasseyColley',
            reference='"Who\'s #1", Langville and Meyer, p.25',
            computation=Computation.SIMULTANEOUS,
            state_model=StateModel.NONE,
            input=InputType.SCORE,
            output=OutputType.DETERMINISTIC,
            ties=True,
            factors=False,
        )

    def validate(self, competitions):
        score_differentials(competitions, rule_name=self.name)

    def right_hand_side(self, matchups, competitions, num_players):
        point_diff = score_differentials(competitions, rule_name=self.name)
        return differential_vector(matchups, point_diff, num_players)
