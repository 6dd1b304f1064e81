import pytest
import numpy as np
from scipy.stats import logistic
from ratpack import (
    Elo,
    Iterate,
    Brier,
    Logarithmic,
    RatingsList,
    RoundRobin,
    GenerateNormal,
    DEFAULT_THETA,
    generate,
    simulate,
    evaluate,
    grid_search,
    cross_validate,
)
from ratpack.core.exceptions import InvalidParameterError, UnsupportedOperationError
from ratpack.eval import expand_grid


@pytest.fixture
def games():
    ratings = generate(8, GenerateNormal(seed=2))
    return simulate(ratings, RoundRobin(n_rounds=3, seed=2), logistic(scale=DEFAULT_THETA))


@pytest.fixture
def start():
    return RatingsList([f'P{idx}' for idx in range(1, 9)])


def iterated_elo(**params):
    return Iterate(Elo(**params))


def test_expand_grid():
    grid = expand_grid({'k': [16, 32], 'r0': [1500.0]})
    assert grid == [{'k': 16, 'r0': 1500.0}, {'k': 32, 'r0': 1500.0}]


def test_evaluate(games, start):
    train, test = games.head(60), games.tail(24)
    result = evaluate(iterated_elo(k=20.0), start, train, test, Brier())
    assert set(result) == {'score', 'duration', 'ratings'}
    assert 0.0 <= result['score'] <= 2.0
    assert result['ratings'].is_complete()


@pytest.mark.parametrize('scoring_rule', [Brier(), Logarithmic()])
def test_grid_search_picks_best(games, start, scoring_rule):
    grid = {'k': [4.0, 16.0, 64.0]}
    best_params, best_score, all_scores = grid_search(
        iterated_elo, start, games, scoring_rule, grid, return_all_scores=True
    )
    assert len(all_scores) == 3
    if scoring_rule.direction == 1:
        assert best_score == max(all_scores)
    else:
        assert best_score == min(all_scores)
    assert best_params == {'k': grid['k'][all_scores.index(best_score)]}


def test_grid_search_configurations(games, start):
    configs = [{'k': 10.0}, {'k': 10.0, 'r0': 1000.0}]
    best_params, best_score = grid_search(iterated_elo, start, games, Brier(), configs)
    assert best_params in configs
    assert np.isfinite(best_score)


def test_cross_validate(games, start):
    scores = cross_validate(iterated_elo(k=16.0), start, games, Logarithmic(), n_folds=4)
    assert scores.shape == (4,)
    assert np.all(scores <= 0.0)
    with pytest.raises(InvalidParameterError):
        cross_validate(iterated_elo(), start, games, Brier(), n_folds=1)
    with pytest.raises(InvalidParameterError):
        cross_validate(iterated_elo(), start, games, Brier(), n_folds=games.height + 1)


def test_grid_search_with_config_grid(games, start):
    from ratpack.configs import elo_params

    best_params, _ = grid_search(iterated_elo, start, games, Brier(), elo_params)
    assert set(best_params) == {'r0', 'k', 'theta'}
    assert 4.0 <= best_params['k'] <= 64.0


def test_config_grids_can_be_searched(games, start):
    from ratpack import update_rule_list
    from ratpack.configs import rule_params, iterate_batch_sizes

    for name, grid in rule_params.items():
        best_params, best_score = grid_search(update_rule_list[name], start, games, Logarithmic(), grid)
        assert set(best_params) == set(grid)
        assert np.isfinite(best_score)

    best_params, _ = grid_search(
        lambda batch_size: Iterate(Elo(), batch_size=batch_size),
        start,
        games,
        Brier(),
        {'batch_size': iterate_batch_sizes},
    )
    assert best_params['batch_size'] in iterate_batch_sizes


def test_grid_search_rejects_rules_without_predictions(games, start):
    from ratpack import Revert, KeenerScores

    with pytest.raises(UnsupportedOperationError, match='Revert'):
        grid_search(Revert, start, games, Brier(), {'fraction': [0.1, 0.5]})
    with pytest.raises(UnsupportedOperationError, match='KeenerScores'):
        grid_search(KeenerScores, start, games, Brier(), {'skew': [True, False]})
