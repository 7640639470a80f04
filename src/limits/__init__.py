"""
Finite limits and colimits.

Products and coproducts, equalizers and coequalizers, generic finite
diagram (co)limits built from those two layers, pullbacks and pushouts,
and the exponential (Cartesian closure).
"""

from src.limits.diagrams import (
    ColimitWitness,
    DiagramArrow,
    FiniteDiagram,
    LimitWitness,
    arrow_from_contract,
    diagram_from_contract,
    finite_colimit,
    finite_limit,
)
from src.limits.equalizers import (
    CoequalizerWitness,
    EqualizerWitness,
    coequalizer,
    equalizer,
    factor_through_coequalizer,
    factor_through_equalizer,
)
from src.limits.exponentials import ExponentialWitness, exponential
from src.limits.products import (
    BinaryProductWitness,
    CoproductWitness,
    ProductUnitWitness,
    ProductWitness,
    binary_product,
    coproduct,
    cotuple,
    product,
    product_unit_witness,
    tuple_into,
    tuple_into_product,
)
from src.limits.pullbacks import (
    FinSetPullbackCalculator,
    PullbackCalculator,
    PullbackWitness,
    PushoutWitness,
    pullback,
    pullback_via_equalizer,
    pushout,
)

__all__ = [
    # Products
    "ProductWitness",
    "CoproductWitness",
    "BinaryProductWitness",
    "ProductUnitWitness",
    "product",
    "tuple_into",
    "tuple_into_product",
    "coproduct",
    "cotuple",
    "binary_product",
    "product_unit_witness",
    # Equalizers
    "EqualizerWitness",
    "CoequalizerWitness",
    "equalizer",
    "coequalizer",
    "factor_through_equalizer",
    "factor_through_coequalizer",
    # Diagrams
    "DiagramArrow",
    "FiniteDiagram",
    "LimitWitness",
    "ColimitWitness",
    "finite_limit",
    "finite_colimit",
    "arrow_from_contract",
    "diagram_from_contract",
    # Pullbacks
    "PullbackWitness",
    "PushoutWitness",
    "PullbackCalculator",
    "FinSetPullbackCalculator",
    "pullback",
    "pullback_via_equalizer",
    "pushout",
    # Exponentials
    "ExponentialWitness",
    "exponential",
]
