"""base class and metadata for rating update rules"""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Tuple
import polars as pl
from ratpack.core.exceptions import UndefinedRuleError, UnsupportedOperationError
from ratpack.utils.data_utils import RatingsList, RatingsTable


class Computation(str, Enum):
    """whether all competitions are used in one calculation or one batch at a time"""

    SIMULTANEOUS = 'simultaneous'
    SEQUENTIAL = 'sequential'


class StateModel(str, Enum):
    """how past ratings are used"""

    RECURSIVE = 'recursive'  # new ratings are built on top of old ratings
    NONE = 'none'  # new ratings ignore old ratings


class InputType(str, Enum):
    """the granularity of competition data a rule consumes"""

    NONE = 'none'
    OUTCOME = 'outcome'
    SCORE = 'score'
    MARGIN = 'margin'
    RESULT = 'result'


class OutputType(str, Enum):
    """the kind of predictions a rule makes"""

    DETERMINISTIC = 'deterministic'
    PROBABILISTIC = 'probabilistic'
    EITHER = 'either'


class ModelType(str, Enum):
    SINGLE = 'single'


@dataclass(frozen=True)
class RuleInfo:
    """
    Description of an update rule.

    Attributes:
        name (str): short name of the rule, e.g. 'Elo'
        reference (str): where the rule comes from
        computation (Computation): simultaneous or sequential
        state_model (StateModel): recursive or none
        input (InputType): competition data used by the rule
        output (OutputType): deterministic or probabilistic predictions
        model (ModelType): the type of model, only 'single' at present
        ties (bool): whether ties are used appropriately
        factors (bool): whether per-player factors are used
        parameters (tuple): descriptions of the rule's parameters
        record (bool): whether the rule can record a ratings trajectory

    Elo is 'simultaneous' because a call represents a single update round,
    sequential Elo is performed by wrapping it in Iterate.
    """

    name: str
    reference: str
    computation: Computation
    state_model: StateModel
    input: InputType
    output: OutputType
    model: ModelType = ModelType.SINGLE
    ties: bool = False
    factors: bool = False
    parameters: Tuple[str, ...] = ()
    record: bool = False

    def as_dict(self) -> dict:
        info = asdict(self)
        for key, val in info.items():
            if isinstance(val, Enum):
                info[key] = val.value
        info['parameters'] = list(self.parameters)
        return info


class UpdateRule:
    """
    Base class for rating update rules.

    A rule is immutable configuration: calling update_ratings never changes the rule
    or the input ratings, it returns a new RatingsList. Subclasses override
    update_ratings and info, and outcome based rules override predict_outcome.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    def update_ratings(self, input_ratings: RatingsList, input_competitions: pl.DataFrame) -> RatingsList:
        """
        Compute one round of updates to ratings.

        Parameters:
            input_ratings (RatingsList): current ratings used by recursive rules
            input_competitions (pl.DataFrame): the outcomes of a series of competitions
        """
        raise UndefinedRuleError(f'undefined update rule {self.name}')

    def info(self) -> RuleInfo:
        raise UndefinedRuleError(f'undefined update rule {self.name}')

    def predict_outcome(
        self,
        rating_a: float,
        rating_b: float,
        factor_a: Optional[float] = None,
        factor_b: Optional[float] = None,
    ):
        """
        Predict the outcome of a single match.

        Returns:
            tuple: probabilities of (A wins, B wins, tie)
        """
        if self.info().input != InputType.OUTCOME:
            raise UnsupportedOperationError(f"the {self.name} update doesn't predict outcomes")
        raise NotImplementedError(f"the {self.name} update doesn't have a prediction function")


def update_ratings(
    rule: UpdateRule,
    input_ratings: RatingsList,
    input_competitions: pl.DataFrame,
    record: Optional[RatingsTable] = None,
) -> RatingsList:
    """
    Compute one round of updates to ratings with the given rule.

    Parameters:
        rule (UpdateRule): the type of update rule to use
        input_ratings (RatingsList): a list of current ratings to be used in recursive updates
        input_competitions (pl.DataFrame): a table containing the outcomes of a series of competitions
        record (RatingsTable, optional): table to record the ratings after each batch, only for
                                         rules that record a trajectory
    """
    if record is None:
        return rule.update_ratings(input_ratings, input_competitions)
    if not rule.info().record:
        raise UnsupportedOperationError(f'the {rule.name} update cannot record ratings')
    return rule.update_ratings(input_ratings, input_competitions, record=record)


def update_info(rule) -> RuleInfo:
    """return information about an update rule, accepts a rule or a rule class with defaults"""
    if isinstance(rule, type):
        rule = rule()
    return rule.info()


def predict_outcome(rule: UpdateRule, rating_a, rating_b, factor_a=None, factor_b=None):
    """predict the outcome of a single match between players rated rating_a and rating_b"""
    return rule.predict_outcome(rating_a, rating_b, factor_a, factor_b)
