"""math utility functions for rating rules"""
import logging
import math
import warnings
import numpy as np
import scipy.linalg
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from ratpack.core.exceptions import SolverFailureError

logger = logging.getLogger(__name__)


def sign(x) -> float:
    """sign of x as a float, 0.0 for ties"""
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return 0.0


def encode_outcome(outcome):
    """map an outcome in {+1, -1, 0} to the (A, B) results 1/0, 0/1 or 0.5/0.5"""
    outcome_a = (sign(outcome) + 1.0) / 2.0
    outcome_b = (sign(-outcome) + 1.0) / 2.0
    return outcome_a, outcome_b


def outcome_class(outcome) -> int:
    """1-based class of an outcome: A wins -> 1, B wins -> 2, tie -> 3"""
    if outcome == 1:
        return 1
    if outcome == -1:
        return 2
    if outcome == 0:
        return 3
    raise ValueError(f'outcome must be one of +1, -1, 0, got {outcome!r}')


def games_matrix(matchups: np.ndarray, num_players: int) -> np.ndarray:
    """
    Matrix with the number of games played on the diagonal and minus the number
    of meetings between each pair off the diagonal.

    Parameters:
        matchups (np.ndarray of shape (n, 2)): player positions for each competition
        num_players (int): the size of the player index
    """
    matrix = np.zeros(shape=(num_players, num_players), dtype=np.float64)
    idx_a, idx_b = matchups[:, 0], matchups[:, 1]
    np.add.at(matrix, (idx_a, idx_b), -1.0)
    np.add.at(matrix, (idx_b, idx_a), -1.0)
    np.add.at(matrix, (idx_a, idx_a), 1.0)
    np.add.at(matrix, (idx_b, idx_b), 1.0)
    return matrix


def colley_matrix(matchups: np.ndarray, num_players: int) -> np.ndarray:
    """Colley's matrix, 2 on the diagonal plus the games matrix"""
    return games_matrix(matchups, num_players) + 2.0 * np.eye(num_players)


def differential_vector(matchups: np.ndarray, diffs: np.ndarray, num_players: int) -> np.ndarray:
    """accumulate diffs into player A's entry and subtract them from player B's"""
    vector = np.zeros(shape=num_players, dtype=np.float64)
    np.add.at(vector, matchups[:, 0], diffs)
    np.add.at(vector, matchups[:, 1], -diffs)
    return vector


def num_components(matchups: np.ndarray, num_players: int) -> int:
    """number of connected components of the competition graph, isolated players included"""
    if num_players == 0:
        return 0
    data = np.ones(shape=matchups.shape[0], dtype=np.float64)
    graph = coo_matrix((data, (matchups[:, 0], matchups[:, 1])), shape=(num_players, num_players))
    n_components, _ = connected_components(graph, directed=False)
    return n_components


def solve_ratings(matrix: np.ndarray, rhs: np.ndarray, rule_name: str) -> np.ndarray:
    """
    Solve matrix @ r = rhs, raising SolverFailureError instead of returning garbage
    when the system is singular or badly conditioned.
    """
    try:
        with warnings.catch_warnings():
            warnings.simplefilter('error', scipy.linalg.LinAlgWarning)
            solution = scipy.linalg.solve(matrix, rhs)
    except (np.linalg.LinAlgError, scipy.linalg.LinAlgWarning, ValueError) as exc:
        logger.error('%s: linear solve failed for a %d x %d system', rule_name, *matrix.shape)
        raise SolverFailureError(f'the {rule_name} linear system could not be solved: {exc}') from exc
    if not np.all(np.isfinite(solution)):
        logger.error('%s: linear solve produced non-finite ratings', rule_name)
        raise SolverFailureError(f'the {rule_name} linear system produced non-finite ratings')
    return solution


def perron_vector(matrix: np.ndarray, tol: float = 1e-12, max_iter: int = 10000) -> np.ndarray:
    """
    The dominant eigenvector of a non-negative irreducible matrix, scaled to sum to 1.

    Uses power iteration, which converges for primitive matrices.
    """
    num_players = matrix.shape[0]
    vector = np.full(shape=num_players, fill_value=1.0 / num_players)
    for _ in range(max_iter):
        new_vector = matrix @ vector
        total = new_vector.sum()
        if total <= 0.0 or not math.isfinite(total):
            raise SolverFailureError('power iteration collapsed, the matrix is not irreducible')
        new_vector /= total
        if np.max(np.abs(new_vector - vector)) < tol:
            return new_vector
        vector = new_vector
    logger.error('power iteration did not converge in %d iterations', max_iter)
    raise SolverFailureError(f'power iteration did not converge in {max_iter} iterations')


def coalesce(x, fill_value: float = 0.0) -> float:
    """x as a float, fill_value when x is None or nan"""
    if x is None or x != x:
        return fill_value
    return float(x)
