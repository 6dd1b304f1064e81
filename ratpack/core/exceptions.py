"""errors and warnings raised by rating rules"""


class RatPackError(Exception):
    """base class for all errors raised by ratpack"""


class UndefinedRuleError(RatPackError, NotImplementedError):
    """a rule/operation combination with no concrete implementation was invoked"""


class InvalidParameterError(RatPackError, ValueError):
    """a rule was constructed with parameters that violate its contract"""


class UnsupportedOperationError(RatPackError, TypeError):
    """an operation was invoked on a rule that structurally cannot support it"""


class PlayerNotFoundError(RatPackError, KeyError):
    """a competition references a player absent from the ratings"""

    def __init__(self, player, rule_name=None, row=None):
        self.player = player
        self.rule_name = rule_name
        self.row = row
        message = f'player {player!r} not found in ratings'
        if rule_name is not None:
            message += f' (rule {rule_name}'
            message += f', row {row})' if row is not None else ')'
        super().__init__(message)

    def __str__(self):
        # KeyError quotes its argument, keep the plain message
        return self.args[0]


class SolverFailureError(RatPackError, ArithmeticError):
    """the linear system of a least-squares rule could not be solved"""


class InvalidCompetitionsError(RatPackError, ValueError):
    """a competition table is missing the columns a rule needs"""


class RecordingOverflowWarning(UserWarning):
    """an iteration rule ran out of space in its ratings table"""
