"""
Equalizers / Coequalizers

Equalizer(f, g): подмножество domain, где f и g совпадают, в исходном
порядке, вместе с включением.

Coequalizer(f, g): фактор codomain по наименьшему отношению эквивалентности,
содержащему (f[i], g[i]). Классы нумеруются по первому появлению
представителя при сканировании codomain слева направо; элементы carrier —
индексы представителей.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from src.core.domain.arrow import FinArrow, compose, equal_arrow
from src.core.domain.carrier import FinObj, make_indexed_obj
from src.core.domain.errors import ShapeMismatch
from src.core.domain.results import FactorResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EqualizerWitness:
    """Equalizer с включением в domain."""

    obj: FinObj
    inclusion: FinArrow


@dataclass(frozen=True)
class CoequalizerWitness:
    """Coequalizer с фактор-отображением."""

    obj: FinObj
    quotient: FinArrow
    representatives: Tuple[int, ...]


def _ensure_parallel(f: FinArrow, g: FinArrow, what: str) -> None:
    if f.source is not g.source:
        raise ShapeMismatch(f"{what}: arrows must share a domain")
    if f.target is not g.target:
        raise ShapeMismatch(f"{what}: arrows must share a codomain")


# =============================================================================
# EQUALIZER
# =============================================================================


def equalizer(f: FinArrow, g: FinArrow) -> EqualizerWitness:
    """
    Equalizer параллельной пары f, g: X → Y.

    Returns:
        EqualizerWitness; obj — элементы X, на которых f и g совпадают

    Raises:
        ShapeMismatch: Если стрелки не параллельны
    """
    _ensure_parallel(f, g, "equalizer")
    domain = f.source
    kept = [i for i in domain.indices() if f.mapping[i] == g.mapping[i]]
    obj = make_indexed_obj(
        [domain.elements[i] for i in kept],
        keys=kept,
        label=f"Eq({domain.label or 'X'})",
    )
    inclusion = FinArrow(source=obj, target=domain, mapping=tuple(kept))
    logger.debug("equalizer: %d of %d domain elements retained", len(kept), domain.size)
    return EqualizerWitness(obj=obj, inclusion=inclusion)


def factor_through_equalizer(
    f: FinArrow,
    g: FinArrow,
    inclusion: FinArrow,
    fork: FinArrow,
) -> FactorResult:
    """
    Единственный медиатор u: Z → E с inclusion ∘ u = fork.

    Args:
        f, g: Параллельная пара
        inclusion: Включение equalizer E ↪ X
        fork: Стрелка Z → X

    Returns:
        FactorResult; factored=False если fork не выравнивает f и g
        или не пропускается через inclusion
    """
    if fork.target is not f.source:
        return FactorResult.failure("fork codomain is not the domain of the parallel pair")
    if inclusion.target is not f.source:
        return FactorResult.failure("inclusion codomain is not the domain of the parallel pair")
    if not equal_arrow(compose(f, fork), compose(g, fork)):
        return FactorResult.failure("fork does not equalize the parallel pair")

    position: Dict[int, int] = {}
    for local, image in enumerate(inclusion.mapping):
        position.setdefault(image, local)

    mapping = []
    for z, x in enumerate(fork.mapping):
        if x not in position:
            return FactorResult.failure(f"fork image {x} of index {z} is outside the equalizer")
        mapping.append(position[x])
    return FactorResult.success(FinArrow(source=fork.source, target=inclusion.source, mapping=tuple(mapping)))


# =============================================================================
# COEQUALIZER
# =============================================================================


class _UnionFind:
    """Union-find по индексам с path compression."""

    def __init__(self, size: int):
        self.parent = list(range(size))

    def find(self, i: int) -> int:
        root = i
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[i] != root:
            self.parent[i], i = root, self.parent[i]
        return root

    def union(self, a: int, b: int) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra != rb:
            # Меньший корень остаётся корнем
            if rb < ra:
                ra, rb = rb, ra
            self.parent[rb] = ra


def quotient_by_pairs(target: FinObj, pairs, label: str = "Coeq") -> CoequalizerWitness:
    """
    Фактор carrier target по эквивалентности, порождённой pairs.

    Используется coequalizer, finite_colimit и pushout.
    """
    uf = _UnionFind(target.size)
    for a, b in pairs:
        uf.union(a, b)

    class_of_root: Dict[int, int] = {}
    representatives: List[int] = []
    mapping: List[int] = []
    for i in target.indices():
        root = uf.find(i)
        if root not in class_of_root:
            class_of_root[root] = len(representatives)
            representatives.append(i)
        mapping.append(class_of_root[root])

    obj = make_indexed_obj(representatives, label=label)
    quotient = FinArrow(source=target, target=obj, mapping=tuple(mapping))
    logger.debug("coequalizer: %d elements -> %d classes", target.size, obj.size)
    return CoequalizerWitness(obj=obj, quotient=quotient, representatives=tuple(representatives))


def coequalizer(f: FinArrow, g: FinArrow) -> CoequalizerWitness:
    """
    Coequalizer параллельной пары f, g: X → Y.

    Raises:
        ShapeMismatch: Если стрелки не параллельны
    """
    _ensure_parallel(f, g, "coequalizer")
    return quotient_by_pairs(
        f.target,
        zip(f.mapping, g.mapping),
        label=f"Coeq({f.target.label or 'Y'})",
    )


def factor_through_coequalizer(quotient: FinArrow, cocone: FinArrow) -> FactorResult:
    """
    Единственный медиатор u: Q → Z с u ∘ quotient = cocone.

    Cocone должен быть постоянен на классах; иначе factored=False.
    """
    if cocone.source is not quotient.source:
        return FactorResult.failure("cocone domain is not the codomain of the parallel pair")

    image_of_class: Dict[int, int] = {}
    for y, cls in enumerate(quotient.mapping):
        value = cocone.mapping[y]
        seen = image_of_class.setdefault(cls, value)
        if seen != value:
            return FactorResult.failure(
                f"cocone is not constant on class {cls}: images {seen} and {value}"
            )

    mapping = tuple(image_of_class[cls] for cls in quotient.target.indices())
    return FactorResult.success(FinArrow(source=quotient.target, target=cocone.target, mapping=mapping))
