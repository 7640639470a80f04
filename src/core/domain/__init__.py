"""
Domain models and value objects.

Contains the fundamental entities of the finite-set kernel: carrier objects,
index arrows, contract-violation errors and structured check results.
"""

from src.core.domain.arrow import (
    FinArrow,
    compose,
    ensure_monic,
    equal_arrow,
    identity,
    image,
    initial_arrow,
    inverse,
    is_epic,
    is_identity,
    is_iso,
    is_monic,
    make_arrow,
    point,
    point_index,
    terminate,
)
from src.core.domain.carrier import (
    FALSE_INDEX,
    INITIAL,
    TERMINAL,
    TRUE_INDEX,
    TRUTH_VALUES,
    FinObj,
    make_indexed_obj,
    make_obj,
)
from src.core.domain.errors import (
    CarrierTooLarge,
    IndexOutOfRange,
    KernelContractViolation,
    MalformedDiagram,
    NotMonomorphism,
    ShapeMismatch,
    SubobjectMismatch,
)
from src.core.domain.results import Certification, FactorResult, IsoWitness, LeqResult

__all__ = [
    # Carrier module
    "FinObj",
    "make_obj",
    "make_indexed_obj",
    "TERMINAL",
    "INITIAL",
    "TRUTH_VALUES",
    "FALSE_INDEX",
    "TRUE_INDEX",
    # Arrow module
    "FinArrow",
    "make_arrow",
    "identity",
    "compose",
    "equal_arrow",
    "is_identity",
    "is_monic",
    "is_epic",
    "is_iso",
    "ensure_monic",
    "inverse",
    "image",
    "terminate",
    "initial_arrow",
    "point",
    "point_index",
    # Errors
    "KernelContractViolation",
    "ShapeMismatch",
    "IndexOutOfRange",
    "NotMonomorphism",
    "MalformedDiagram",
    "CarrierTooLarge",
    "SubobjectMismatch",
    # Results
    "FactorResult",
    "Certification",
    "LeqResult",
    "IsoWitness",
]
