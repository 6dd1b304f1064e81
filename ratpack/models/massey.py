"""
Massey's least squares method
"Who's #1", Langville and Meyer, ch. 2
"""
import logging
from dataclasses import dataclass
import polars as pl
from ratpack.core.base import UpdateRule, RuleInfo, Computation, StateModel, InputType, OutputType
from ratpack.core.exceptions import SolverFailureError
from ratpack.utils.data_utils import RatingsList, player_indexes, indexed_matchups, score_differentials
from ratpack.utils.math_utils import games_matrix, differential_vector, num_components, solve_ratings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Massey(UpdateRule):
    """
    Massey ratings from the point differentials of all competitions at once.

    The normal equations M r = p have games played on the diagonal of M, minus the
    number of meetings off the diagonal, and cumulative point differentials in p.
    M is singular, so its last row is replaced by ones (and p's last entry by 0),
    which makes the ratings sum to zero. The input ratings are only used for the
    list of players.
    """

    def info(self) -> RuleInfo:
        return RuleInfo(
            name='Massey',
            reference='"Who\'s #1", Langville and Meyer, p.9',
            computation=Computation.SIMULTANEOUS,
            state_model=StateModel.NONE,
            input=InputType.SCORE,
            output=OutputType.DETERMINISTIC,
            ties=True,
            factors=False,
        )

    def update_ratings(self, input_ratings: RatingsList, input_competitions: pl.DataFrame) -> RatingsList:
        point_diff = score_differentials(input_competitions, rule_name=self.name)
        players = input_ratings.players
        num_players = len(players)
        if num_players == 0:
            return RatingsList()
        index = player_indexes(players)
        matchups = indexed_matchups(input_competitions, index, rule_name=self.name)

        n_components = num_components(matchups, num_players)
        if n_components > 1:
            logger.error('%s: competition graph has %d components', self.name, n_components)
            raise SolverFailureError(
                f'the {self.name} system is singular: the competition graph has {n_components} '
                'disconnected components'
            )

        matrix = games_matrix(matchups, num_players)
        rhs = differential_vector(matchups, point_diff, num_players)
        matrix[-1, :] = 1.0
        rhs[-1] = 0.0
        logger.debug('%s: solving a %d x %d system', self.name, num_players, num_players)
        ratings = solve_ratings(matrix, rhs, self.name)
        return RatingsList(players, {player: float(ratings[index[player]]) for player in players})
