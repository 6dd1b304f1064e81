"""
Keener's method on small tables
"""
import pytest
import numpy as np
from ratpack import KeenerScores, RatingsList, make_competitions
from ratpack.core.exceptions import InvalidParameterError, SolverFailureError, InvalidCompetitionsError
from ratpack.models.keener import keener_skew
from ratpack.utils.math_utils import perron_vector


def test_keener_even_scores():
    games = make_competitions(['A'], ['B'], [0], score_a=[5.0], score_b=[5.0])
    new_ratings = KeenerScores().update_ratings(RatingsList(['A', 'B']), games)
    assert new_ratings['A'] == pytest.approx(0.5)
    assert new_ratings['B'] == pytest.approx(0.5)


def test_keener_orders_players():
    games = make_competitions(
        ['A', 'B', 'A', 'C'],
        ['B', 'C', 'C', 'A'],
        [1, 1, 1, -1],
        score_a=[30.0, 21.0, 28.0, 10.0],
        score_b=[10.0, 14.0, 7.0, 24.0],
    )
    for skew in (True, False):
        for normalize in (True, False):
            rule = KeenerScores(skew=skew, normalize=normalize)
            new_ratings = rule.update_ratings(RatingsList(['A', 'B', 'C']), games)
            assert sum(new_ratings.ratings.values()) == pytest.approx(1.0)
            assert new_ratings['A'] > new_ratings['B'] > new_ratings['C']


def test_keener_skew():
    assert keener_skew(0.5) == pytest.approx(0.5)
    assert keener_skew(1.0) == pytest.approx(1.0)
    assert keener_skew(0.0) == pytest.approx(0.0)
    assert keener_skew(0.625) == pytest.approx(0.75)


def test_keener_disconnected_without_perturbation():
    games = make_competitions(['A', 'C'], ['B', 'D'], [1, 1], score_a=[3.0, 2.0], score_b=[1.0, 1.0])
    players = RatingsList(['A', 'B', 'C', 'D'])
    with pytest.raises(SolverFailureError):
        KeenerScores(epsilon=0.0).update_ratings(players, games)
    assert sum(KeenerScores().update_ratings(players, games).ratings.values()) == pytest.approx(1.0)


def test_keener_invalid_input():
    with pytest.raises(InvalidParameterError):
        KeenerScores(epsilon=-1.0)
    games = make_competitions(['A'], ['B'], [1], score_a=[-3.0], score_b=[1.0])
    with pytest.raises(InvalidCompetitionsError):
        KeenerScores().update_ratings(RatingsList(['A', 'B']), games)


def test_perron_vector():
    vector = perron_vector(np.array([[2.0, 1.0], [1.0, 2.0]]))
    np.testing.assert_allclose(vector, [0.5, 0.5])
    # periodic, the iterates alternate between two vectors
    with pytest.raises(SolverFailureError):
        perron_vector(np.array([[0.0, 2.0], [1.0, 0.0]]), max_iter=50)
