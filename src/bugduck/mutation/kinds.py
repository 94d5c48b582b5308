"""
The closed set of bug categories the catalog can inject.
"""

from enum import Enum


class BugKind(str, Enum):
    BOOLEAN_NEGATION = "booleanNegation"
    OFF_BY_ONE = "offByOne"
    LOGICAL_AND_OR_SWAP = "logicalAndOrSwap"
    COMPARISON_DIRECTION_FLIP = "comparisonDirectionFlip"
    EQUALITY_INEQUALITY_FLIP = "equalityInequalityFlip"
    INVERT_TERNARY_BRANCHES = "invertTernaryBranches"
    WRONG_ARITHMETIC_OPERATOR = "wrongArithmeticOperator"
    BITWISE_LOGICAL_SWAP = "bitwiseLogicalSwap"
    INDEX_OFF_BY_ONE = "indexOffByOne"
    GENERAL_BOUNDARY_OFF_BY_ONE = "generalBoundaryOffByOne"
    HOMOGLYPH_SABOTAGE = "homoglyphSabotage"
    SCOPE_GASLIGHTING = "scopeGaslighting"

    def __str__(self) -> str:
        return self.value
