"""
Pullback / Pushout

Pullback коспана f: A → C ← B: g.

- pullback(): специализация через пересечение image support. Для каждого
  общего codomain-индекса (по возрастанию) берётся НАИМЕНЬШИЙ индекс domain
  с каждой стороны. Точна, когда обе стрелки мономорфны (случай
  классификатора подобъектов).
- pullback_via_equalizer(): общий случай, equalizer f∘π₁ и g∘π₂ на A × B.

Pushout спана f: A → B, g: A → C: coproduct B + C, фактор по
inj₁(f[x]) ~ inj₂(g[x]).

PullbackCalculator — минимальный набор операций (pullback, factor_cone,
certify, induce, comparison), который SubobjectClassifier получает извне.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Protocol, Tuple

from src.core.config import KernelLimits
from src.core.domain.arrow import FinArrow, compose, equal_arrow, identity
from src.core.domain.carrier import FinObj, make_indexed_obj
from src.core.domain.errors import KernelContractViolation, ShapeMismatch
from src.core.domain.results import Certification, FactorResult, IsoWitness
from src.limits.equalizers import (
    CoequalizerWitness,
    equalizer,
    factor_through_coequalizer,
    quotient_by_pairs,
)
from src.limits.products import CoproductWitness, binary_product, coproduct, cotuple

logger = logging.getLogger(__name__)

PairLookup = Dict[Tuple[int, int], int]


# =============================================================================
# PULLBACK
# =============================================================================


def _pair_lookup(to_domain: FinArrow, to_anchor: FinArrow) -> PairLookup:
    """(domain-индекс, anchor-индекс) → первый apex-индекс с этими проекциями."""
    lookup: PairLookup = {}
    for k, pair in enumerate(zip(to_domain.mapping, to_anchor.mapping)):
        lookup.setdefault(pair, k)
    return lookup


@dataclass(frozen=True)
class PullbackWitness:
    """
    Pullback коспана f: A → C ← B: g.

    to_domain: apex → A, to_anchor: apex → B, to_codomain: apex → C.
    pair_lookup: (индекс в A, индекс в B) → apex-индекс, строится при конструировании.
    """

    apex: FinObj
    to_domain: FinArrow
    to_anchor: FinArrow
    to_codomain: FinArrow
    f: FinArrow
    g: FinArrow
    pair_lookup: Mapping[Tuple[int, int], int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "pair_lookup", MappingProxyType(_pair_lookup(self.to_domain, self.to_anchor)))

    def square_commutes(self) -> bool:
        return equal_arrow(compose(self.f, self.to_domain), compose(self.g, self.to_anchor))

    def factor_cone(self, apex: FinObj, to_domain: FinArrow, to_anchor: FinArrow) -> FactorResult:
        """Медиатор кандидат-конуса (apex, to_domain, to_anchor) в этот pullback."""
        return _factor_cone(self, apex, to_domain, to_anchor)


def _factor_cone(
    target: PullbackWitness,
    apex: FinObj,
    to_domain: FinArrow,
    to_anchor: FinArrow,
) -> FactorResult:
    if to_domain.source is not apex or to_anchor.source is not apex:
        return FactorResult.failure("cone legs must originate at the cone apex")
    if to_domain.target is not target.f.source:
        return FactorResult.failure("cone domain leg must land in dom(f)")
    if to_anchor.target is not target.g.source:
        return FactorResult.failure("cone anchor leg must land in dom(g)")
    if not equal_arrow(compose(target.f, to_domain), compose(target.g, to_anchor)):
        return FactorResult.failure("cone does not commute with the cospan")

    mapping = []
    for z, pair in enumerate(zip(to_domain.mapping, to_anchor.mapping)):
        k = target.pair_lookup.get(pair)
        if k is None:
            return FactorResult.failure(
                f"cone element {z} projects to {pair}, which is absent from the pullback apex"
            )
        mapping.append(k)

    mediator = FinArrow(source=apex, target=target.apex, mapping=tuple(mapping))
    if not equal_arrow(compose(target.to_domain, mediator), to_domain):
        return FactorResult.failure("mediated domain leg does not reproduce the cone")
    if not equal_arrow(compose(target.to_anchor, mediator), to_anchor):
        return FactorResult.failure("mediated anchor leg does not reproduce the cone")
    return FactorResult.success(mediator)


def _ensure_cospan(f: FinArrow, g: FinArrow, what: str) -> None:
    if f.target is not g.target:
        raise ShapeMismatch(f"{what}: arrows must share a codomain")


def pullback(f: FinArrow, g: FinArrow) -> PullbackWitness:
    """
    Pullback через пересечение image support.

    Tie-break: для каждого общего образа выбирается наименьший индекс domain
    с каждой стороны.

    Raises:
        ShapeMismatch: Если f и g не имеют общего codomain
    """
    _ensure_cospan(f, g, "pullback")

    first_f: Dict[int, int] = {}
    for a, c in enumerate(f.mapping):
        first_f.setdefault(c, a)
    first_g: Dict[int, int] = {}
    for b, c in enumerate(g.mapping):
        first_g.setdefault(c, b)

    shared = sorted(first_f.keys() & first_g.keys())
    pairs = [(first_f[c], first_g[c]) for c in shared]
    apex = make_indexed_obj(pairs, label="Pb")
    witness = PullbackWitness(
        apex=apex,
        to_domain=FinArrow(source=apex, target=f.source, mapping=tuple(a for a, _ in pairs)),
        to_anchor=FinArrow(source=apex, target=g.source, mapping=tuple(b for _, b in pairs)),
        to_codomain=FinArrow(source=apex, target=f.target, mapping=tuple(shared)),
        f=f,
        g=g,
    )
    logger.debug("pullback: |im f|=%d, |im g|=%d -> apex %d", len(first_f), len(first_g), apex.size)
    return witness


def pullback_via_equalizer(
    f: FinArrow,
    g: FinArrow,
    limits: Optional[KernelLimits] = None,
) -> PullbackWitness:
    """
    Общий pullback: equalizer f∘π₁ и g∘π₂ на dom f × dom g.

    Элементы apex — пары (a, b) с f(a) = g(b) в порядке product.

    Raises:
        ShapeMismatch: Если f и g не имеют общего codomain
        CarrierTooLarge: Если |dom f| · |dom g| превышает лимит
    """
    _ensure_cospan(f, g, "pullback")
    prod = binary_product(f.source, g.source, limits)
    eq = equalizer(compose(f, prod.proj1), compose(g, prod.proj2))
    to_domain = compose(prod.proj1, eq.inclusion)
    to_anchor = compose(prod.proj2, eq.inclusion)
    logger.debug("pullback_via_equalizer: product %d -> apex %d", prod.obj.size, eq.obj.size)
    return PullbackWitness(
        apex=eq.obj,
        to_domain=to_domain,
        to_anchor=to_anchor,
        to_codomain=compose(f, to_domain),
        f=f,
        g=g,
    )


# =============================================================================
# PUSHOUT
# =============================================================================


@dataclass(frozen=True)
class PushoutWitness:
    """
    Pushout спана f: A → B, g: A → C.

    from_domain: B → apex, from_anchor: C → apex.
    """

    apex: FinObj
    from_domain: FinArrow
    from_anchor: FinArrow
    coproduct: CoproductWitness
    quotient: CoequalizerWitness
    f: FinArrow
    g: FinArrow

    def square_commutes(self) -> bool:
        return equal_arrow(compose(self.from_domain, self.f), compose(self.from_anchor, self.g))

    def factor_cocone(self, apex: FinObj, from_domain: FinArrow, from_anchor: FinArrow) -> FactorResult:
        """Медиатор из pushout в кандидат-коконус (apex, from_domain, from_anchor)."""
        if from_domain.target is not apex or from_anchor.target is not apex:
            return FactorResult.failure("cocone legs must land in the cocone apex")
        if from_domain.source is not self.f.target:
            return FactorResult.failure("cocone domain leg must start at cod(f)")
        if from_anchor.source is not self.g.target:
            return FactorResult.failure("cocone anchor leg must start at cod(g)")
        if not equal_arrow(compose(from_domain, self.f), compose(from_anchor, self.g)):
            return FactorResult.failure("cocone does not commute with the span")

        candidate = cotuple(self.coproduct.obj, [from_domain, from_anchor], apex)
        return factor_through_coequalizer(self.quotient.quotient, candidate)


def pushout(f: FinArrow, g: FinArrow) -> PushoutWitness:
    """
    Pushout общей пары f: A → B, g: A → C.

    Raises:
        ShapeMismatch: Если f и g не имеют общего domain
    """
    if f.source is not g.source:
        raise ShapeMismatch("pushout: arrows must share a domain")

    coprod = coproduct([f.target, g.target])
    inj_domain, inj_anchor = coprod.injections
    pairs = [(inj_domain.mapping[b], inj_anchor.mapping[c]) for b, c in zip(f.mapping, g.mapping)]
    coeq = quotient_by_pairs(coprod.obj, pairs, label="Po")
    logger.debug("pushout: %d + %d -> apex %d", f.target.size, g.target.size, coeq.obj.size)
    return PushoutWitness(
        apex=coeq.obj,
        from_domain=compose(coeq.quotient, inj_domain),
        from_anchor=compose(coeq.quotient, inj_anchor),
        coproduct=coprod,
        quotient=coeq,
        f=f,
        g=g,
    )


# =============================================================================
# PULLBACK CALCULATOR
# =============================================================================


class PullbackCalculator(Protocol):
    """Минимальная capability для вычисления и сравнения pullback."""

    def pullback(self, f: FinArrow, g: FinArrow) -> PullbackWitness:
        ...

    def factor_cone(
        self, target: PullbackWitness, apex: FinObj, to_domain: FinArrow, to_anchor: FinArrow
    ) -> FactorResult:
        ...

    def certify(self, f: FinArrow, g: FinArrow, candidate: PullbackWitness) -> Certification:
        ...

    def induce(self, j: FinArrow, pullback_of_f: PullbackWitness, pullback_of_g: PullbackWitness) -> FinArrow:
        ...

    def comparison(
        self, f: FinArrow, g: FinArrow, left: PullbackWitness, right: PullbackWitness
    ) -> IsoWitness:
        ...


class FinSetPullbackCalculator:
    """
    PullbackCalculator для конечных множеств на equalizer-конструкции.

    Lookup пар проекций принадлежит самому PullbackWitness; калькулятор
    состояния между вызовами не хранит.
    """

    def __init__(self, limits: Optional[KernelLimits] = None):
        self.limits = limits

    def pullback(self, f: FinArrow, g: FinArrow) -> PullbackWitness:
        return pullback_via_equalizer(f, g, self.limits)

    def factor_cone(
        self, target: PullbackWitness, apex: FinObj, to_domain: FinArrow, to_anchor: FinArrow
    ) -> FactorResult:
        return _factor_cone(target, apex, to_domain, to_anchor)

    def certify(self, f: FinArrow, g: FinArrow, candidate: PullbackWitness) -> Certification:
        """
        Проверка, что candidate — pullback коспана f, g.

        Кандидат и канонический witness должны факторизоваться друг через
        друга, и оба round trip — тождества.
        """
        if candidate.to_domain.source is not candidate.apex:
            return Certification(False, "domain leg must originate at the candidate apex")
        if candidate.to_anchor.source is not candidate.apex:
            return Certification(False, "anchor leg must originate at the candidate apex")
        if candidate.to_domain.target is not f.source:
            return Certification(False, "domain leg must land in dom(f)")
        if candidate.to_anchor.target is not g.source:
            return Certification(False, "anchor leg must land in dom(g)")
        if not equal_arrow(compose(f, candidate.to_domain), compose(g, candidate.to_anchor)):
            return Certification(False, "candidate square does not commute with the cospan")

        canonical = self.pullback(f, g)
        to_canonical = self.factor_cone(canonical, candidate.apex, candidate.to_domain, candidate.to_anchor)
        if not to_canonical.factored:
            return Certification(False, to_canonical.reason)

        to_candidate = self.factor_cone(candidate, canonical.apex, canonical.to_domain, canonical.to_anchor)
        if not to_candidate.factored:
            return Certification(False, to_candidate.reason)

        if not equal_arrow(compose(to_canonical.mediator, to_candidate.mediator), identity(canonical.apex)):
            return Certification(False, "factorisation does not reduce to the identity on the canonical apex")
        if not equal_arrow(compose(to_candidate.mediator, to_canonical.mediator), identity(candidate.apex)):
            return Certification(False, "factorisation does not reduce to the identity on the candidate apex")
        return Certification(True)

    def induce(self, j: FinArrow, pullback_of_f: PullbackWitness, pullback_of_g: PullbackWitness) -> FinArrow:
        """
        Стрелка между pullback вдоль общего anchor, индуцированная j: dom f → dom g.

        Raises:
            ShapeMismatch: Если j не соединяет domain двух pullback
            KernelContractViolation: Если образ не попадает в целевой pullback
        """
        if j.source is not pullback_of_f.to_domain.target or j.target is not pullback_of_g.to_domain.target:
            raise ShapeMismatch("induce: j must map dom(f) to dom(g)")

        lookup = pullback_of_g.pair_lookup
        mapping = []
        for a, b in zip(pullback_of_f.to_domain.mapping, pullback_of_f.to_anchor.mapping):
            k = lookup.get((j.mapping[a], b))
            if k is None:
                raise KernelContractViolation("induce: mediator data does not land in the target pullback")
            mapping.append(k)
        return FinArrow(source=pullback_of_f.apex, target=pullback_of_g.apex, mapping=tuple(mapping))

    def comparison(
        self, f: FinArrow, g: FinArrow, left: PullbackWitness, right: PullbackWitness
    ) -> IsoWitness:
        """
        Канонический изоморфизм между двумя pullback одного коспана.

        Raises:
            KernelContractViolation: Если один witness не факторизуется через другой
        """
        for witness in (left, right):
            if not equal_arrow(compose(f, witness.to_domain), compose(g, witness.to_anchor)):
                raise KernelContractViolation("comparison: witness square does not commute with the cospan")
        forward = self.factor_cone(right, left.apex, left.to_domain, left.to_anchor)
        if not forward.factored:
            raise KernelContractViolation(f"comparison: {forward.reason}")
        backward = self.factor_cone(left, right.apex, right.to_domain, right.to_anchor)
        if not backward.factored:
            raise KernelContractViolation(f"comparison: {backward.reason}")
        return IsoWitness(forward=forward.mediator, backward=backward.mediator)
