"""utils for evaluating and tuning rating rules"""
import itertools
import logging
import time
from copy import deepcopy
from typing import Callable, Dict, Iterable, List, Union
import numpy as np
import polars as pl
from ratpack.core.base import UpdateRule, InputType, update_ratings
from ratpack.core.exceptions import InvalidParameterError, UnsupportedOperationError
from ratpack.scoring import ScoringRule, score_ratings, score_direction
from ratpack.utils.data_utils import RatingsList, split_competitions

logger = logging.getLogger(__name__)


def evaluate(
    rule: UpdateRule,
    ratings: RatingsList,
    train: pl.DataFrame,
    test: pl.DataFrame,
    scoring_rule: ScoringRule,
) -> dict:
    """fit a rule on train starting from ratings and score its predictions on test"""
    start_time = time.time()
    fitted = update_ratings(rule, ratings, train)
    score = score_ratings(scoring_rule, test, rule, fitted)
    return {'score': score, 'duration': time.time() - start_time, 'ratings': fitted}


def expand_grid(grid: Dict[str, Iterable]) -> List[dict]:
    """every combination of the values in a dict of parameter lists"""
    keys = list(grid.keys())
    return [dict(zip(keys, values)) for values in itertools.product(*grid.values())]


def grid_search(
    rule_class: Callable[..., UpdateRule],
    ratings: RatingsList,
    competitions: pl.DataFrame,
    scoring_rule: ScoringRule,
    param_configurations: Union[Dict[str, Iterable], List[dict]],
    test_fraction: float = 0.2,
    return_all_scores: bool = False,
):
    """
    Find the parameters of a rule scoring best on the last test_fraction of competitions.

    Parameters:
        rule_class (callable): builds a rule from keyword parameters, e.g. Elo
        ratings (RatingsList): the starting ratings, listing every player
        competitions (pl.DataFrame): competitions in order, split chronologically into train and test
        scoring_rule (ScoringRule): the scoring rule, its direction decides what is best
        param_configurations (dict or list of dict): a grid as in configs.py, or explicit configurations
    """
    if isinstance(param_configurations, dict):
        param_configurations = expand_grid(param_configurations)
    train, test = split_competitions(competitions, test_fraction)
    direction = score_direction(scoring_rule)

    best_params, best_score = {}, None
    all_scores = []
    for params in param_configurations:
        rule = rule_class(**params)
        if rule.info().input != InputType.OUTCOME:
            raise UnsupportedOperationError(f'the {rule.name} update does not predict outcomes and cannot be tuned')
        score = evaluate(rule, ratings, train, test, scoring_rule)['score']
        all_scores.append(score)
        logger.info('%s %s: %.6f', rule.name, params, score)
        if best_score is None or score * direction > best_score * direction:
            best_score = score
            best_params = deepcopy(params)

    if not return_all_scores:
        return best_params, best_score
    return best_params, best_score, all_scores


def cross_validate(
    rule: UpdateRule,
    ratings: RatingsList,
    competitions: pl.DataFrame,
    scoring_rule: ScoringRule,
    n_folds: int = 5,
) -> np.ndarray:
    """
    Score a rule on each of n_folds contiguous folds after fitting it on the remaining rows.

    Returns:
        np.ndarray of shape (n_folds,): the average score on each fold
    """
    num_rows = competitions.height
    if not 2 <= n_folds <= num_rows:
        raise InvalidParameterError(f'n_folds must be between 2 and {num_rows}, got {n_folds}')
    bounds = np.linspace(0, num_rows, num=n_folds + 1).astype(np.int64)
    scores = np.empty(shape=n_folds, dtype=np.float64)
    for fold, (start, end) in enumerate(zip(bounds[:-1].tolist(), bounds[1:].tolist())):
        test = competitions.slice(start, end - start)
        train = pl.concat([competitions.slice(0, start), competitions.slice(end)])
        scores[fold] = evaluate(rule, ratings, train, test, scoring_rule)['score']
        logger.info('%s fold %d: %.6f', rule.name, fold, scores[fold])
    return scores
