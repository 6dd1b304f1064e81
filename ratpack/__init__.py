"""
ratpack - rating rules for pairwise competitions.

Compute ratings with interchangeable update rules (Elo, Massey, Colley and friends),
replay competitions sequentially with Iterate, simulate competitions from ratings and
score the predictions of a rule.

Quick Start:
    from ratpack import RatingsList, Elo, Iterate, make_competitions, update_ratings

    ratings = RatingsList(['A', 'B', 'C'])
    games = make_competitions(['A', 'B'], ['B', 'C'], [1, -1])
    new_ratings = update_ratings(Iterate(Elo(k=32.0), batch_size=1), ratings, games)
    new_ratings.print_leaderboard(3)
"""

from ratpack.core.base import (
    UpdateRule,
    RuleInfo,
    Computation,
    StateModel,
    InputType,
    OutputType,
    ModelType,
    update_ratings,
    update_info,
    predict_outcome,
)
from ratpack.core.exceptions import (
    RatPackError,
    UndefinedRuleError,
    InvalidParameterError,
    UnsupportedOperationError,
    PlayerNotFoundError,
    SolverFailureError,
    InvalidCompetitionsError,
    RecordingOverflowWarning,
)
from ratpack.models import (
    Elo,
    EloF,
    Massey,
    Colley,
    MasseyColley,
    KeenerScores,
    Revert,
    Iterate,
    SampleIterate,
    update_rule_list,
    update_rule_names,
)
from ratpack.scoring import (
    ScoringRule,
    Brier,
    Logarithmic,
    Quadratic,
    Spherical,
    score_ratings,
    scoring_function,
    score_direction,
    scoring_rule_list,
    scoring_rule_names,
)
from ratpack.simulation import (
    SimulateRule,
    GenerateRule,
    RoundRobin,
    RoundRobinF,
    Elimination,
    GenerateUniform,
    GenerateNormal,
    simulate,
    generate,
    simulate_rule_list,
    simulate_rule_names,
)
from ratpack.eval import evaluate, grid_search, cross_validate
from ratpack.utils.constants import DEFAULT_THETA
from ratpack.utils.data_utils import (
    RatingsList,
    RatingsTable,
    player_indexes,
    make_competitions,
    validate_competitions,
    split_competitions,
)

__version__ = '0.1.0'
