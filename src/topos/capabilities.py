"""
Capability bundle для семейства конечных множеств

Плоская запись функций, через которую внешний код (проверка законов,
надстройки над ядром) получает все операции ядра, не импортируя модули
по отдельности.
"""

from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional

from src.core.config import DEFAULT_LIMITS, KernelLimits
from src.core.domain.arrow import compose, equal_arrow, identity
from src.limits.diagrams import finite_colimit, finite_limit
from src.limits.equalizers import coequalizer, equalizer
from src.limits.exponentials import exponential
from src.limits.products import coproduct, cotuple, product, tuple_into
from src.limits.pullbacks import FinSetPullbackCalculator, pushout
from src.topos.classifier import SubobjectClassifier
from src.topos.power_object import power_object


@dataclass(frozen=True)
class FinSetCapabilities:
    """Набор операций ядра FinSet."""

    identity: Callable
    compose: Callable
    equal: Callable
    equalize: Callable
    coequalize: Callable
    product: Callable
    tuple: Callable
    coproduct: Callable
    cotuple: Callable
    exponential: Callable
    curry: Callable
    uncurry: Callable
    characteristic: Callable
    pullback: Callable
    pushout: Callable
    finite_limit: Callable
    finite_colimit: Callable
    power_object: Callable
    classifier: SubobjectClassifier
    limits: KernelLimits


def finset_capabilities(limits: Optional[KernelLimits] = None) -> FinSetCapabilities:
    """
    Собрать capability bundle с общими limits и одним классификатором.

    curry(witness, X, h) и uncurry(witness, X, k) принимают ExponentialWitness
    первым аргументом.
    """
    limits = limits or DEFAULT_LIMITS
    calculator = FinSetPullbackCalculator(limits)
    classifier = SubobjectClassifier(calculator=calculator, limits=limits)

    return FinSetCapabilities(
        identity=identity,
        compose=compose,
        equal=equal_arrow,
        equalize=equalizer,
        coequalize=coequalizer,
        product=partial(product, limits=limits),
        tuple=tuple_into,
        coproduct=coproduct,
        cotuple=cotuple,
        exponential=partial(exponential, limits=limits),
        curry=lambda witness, obj, h: witness.curry(obj, h),
        uncurry=lambda witness, obj, k: witness.uncurry(obj, k),
        characteristic=classifier.characteristic,
        pullback=calculator.pullback,
        pushout=pushout,
        finite_limit=partial(finite_limit, limits=limits),
        finite_colimit=partial(finite_colimit, limits=limits),
        power_object=partial(power_object, classifier=classifier, limits=limits),
        classifier=classifier,
        limits=limits,
    )
