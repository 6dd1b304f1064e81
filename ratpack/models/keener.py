"""
Keener's method
"Who's #1", Langville and Meyer, ch. 4
"""
import logging
from dataclasses import dataclass
import numpy as np
import polars as pl
from ratpack.core.base import UpdateRule, RuleInfo, Computation, StateModel, InputType, OutputType
from ratpack.core.exceptions import InvalidParameterError, InvalidCompetitionsError, SolverFailureError
from ratpack.utils.constants import SCORE_A, SCORE_B
from ratpack.utils.data_utils import (
    RatingsList,
    player_indexes,
    indexed_matchups,
    score_differentials,
)
from ratpack.utils.math_utils import num_components, perron_vector

logger = logging.getLogger(__name__)


def keener_skew(x: np.ndarray) -> np.ndarray:
    """h(x) = 1/2 + sign(x - 1/2) sqrt(|2x - 1|) / 2, spreads out values near 1/2"""
    return 0.5 + 0.5 * np.sign(x - 0.5) * np.sqrt(np.abs(2.0 * x - 1.0))


@dataclass(frozen=True)
class KeenerScores(UpdateRule):
    """
    Ratings as the Perron vector of a matrix of Laplace-smoothed score shares.

    Parameters:
        skew (bool): apply Keener's skewing function to the score shares. Defaults to True.
        normalize (bool): divide each row by the number of games the player played. Defaults to True.
        epsilon (float): added to every entry so the matrix is irreducible. Defaults to 1e-4,
                         with 0.0 a disconnected competition graph raises SolverFailureError.
    """

    skew: bool = True
    normalize: bool = True
    epsilon: float = 1e-4

    def __post_init__(self):
        if not self.epsilon >= 0.0:
            raise InvalidParameterError(f'{self.name}: epsilon must be non-negative, got {self.epsilon}')

    def info(self) -> RuleInfo:
        return RuleInfo(
            name='KeenerScores',
            reference='"Who\'s #1", Langville and Meyer, p.29',
            computation=Computation.SIMULTANEOUS,
            state_model=StateModel.NONE,
            input=InputType.SCORE,
            output=OutputType.DETERMINISTIC,
            ties=True,
            factors=False,
            parameters=(
                'skew, apply the skewing function',
                'normalize, divide by games played',
                'epsilon, perturbation for irreducibility',
            ),
        )

    def keener_matrix(self, matchups: np.ndarray, scores: np.ndarray, num_players: int) -> np.ndarray:
        """the non-negative matrix whose Perron vector gives the ratings"""
        totals = np.zeros(shape=(num_players, num_players), dtype=np.float64)
        np.add.at(totals, (matchups[:, 0], matchups[:, 1]), scores[:, 0])
        np.add.at(totals, (matchups[:, 1], matchups[:, 0]), scores[:, 1])
        meetings = np.zeros(shape=(num_players, num_players), dtype=bool)
        meetings[matchups[:, 0], matchups[:, 1]] = True
        meetings[matchups[:, 1], matchups[:, 0]] = True
        np.fill_diagonal(meetings, False)

        shares = (totals + 1.0) / (totals + totals.T + 2.0)
        if self.skew:
            shares = keener_skew(shares)
        matrix = np.where(meetings, shares, 0.0)

        if self.normalize:
            games = np.zeros(shape=num_players, dtype=np.float64)
            np.add.at(games, matchups[:, 0], 1.0)
            np.add.at(games, matchups[:, 1], 1.0)
            matrix = matrix / np.where(games > 0, games, 1.0)[:, None]
        return matrix + self.epsilon

    def update_ratings(self, input_ratings: RatingsList, input_competitions: pl.DataFrame) -> RatingsList:
        score_differentials(input_competitions, rule_name=self.name)
        scores = np.column_stack(
            [input_competitions[col].cast(pl.Float64).to_numpy() for col in (SCORE_A, SCORE_B)]
        )
        if np.any(scores < 0.0):
            raise InvalidCompetitionsError(f'{self.name} needs non-negative scores')
        players = input_ratings.players
        num_players = len(players)
        if num_players == 0:
            return RatingsList()
        index = player_indexes(players)
        matchups = indexed_matchups(input_competitions, index, rule_name=self.name)

        if self.epsilon == 0.0 and num_components(matchups, num_players) > 1:
            logger.error('%s: disconnected competition graph with epsilon = 0', self.name)
            raise SolverFailureError(f'the {self.name} matrix is reducible: the competition graph is disconnected')

        matrix = self.keener_matrix(matchups, scores, num_players)
        # shifting by the identity keeps the Perron vector and makes power iteration converge
        ratings = perron_vector(matrix + np.eye(num_players))
        return RatingsList(players, {player: float(ratings[index[player]]) for player in players})
