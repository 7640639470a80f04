"""
Generic Diagram (Co)Limit Engine

Любой конечный предел сводится к «один product + один equalizer»:

1. P = ∏ объектов диаграммы (в порядке меток)
2. Для каждой структурной стрелки a: i → j две стрелки P → D_j:
   a ∘ π_i и π_j
3. Обе семьи собираются (tuple_into) в две стрелки P → ∏_a D_target(a)
4. Предел = equalizer этой пары; legs = π_k ∘ inclusion

Копредел строго двойственен: coproduct объектов, две стрелки из coproduct
источников структурных стрелок, копредел = их coequalizer.

Некоммутирующий кандидат-конус возвращается как FactorResult(factored=False),
а не исключение.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, model_validator

from src.core.config import DEFAULT_LIMITS, KernelLimits, ensure_within
from src.core.contracts.validators import validate_arrow, validate_diagram
from src.core.domain.arrow import (
    FinArrow,
    compose,
    equal_arrow,
    initial_arrow,
    make_arrow,
    terminate,
)
from src.core.domain.carrier import INITIAL, TERMINAL, FinObj, make_obj
from src.core.domain.errors import MalformedDiagram, ShapeMismatch
from src.core.domain.results import FactorResult
from src.limits.equalizers import (
    CoequalizerWitness,
    EqualizerWitness,
    coequalizer,
    equalizer,
    factor_through_coequalizer,
    factor_through_equalizer,
)
from src.limits.products import (
    CoproductWitness,
    ProductWitness,
    coproduct,
    cotuple,
    product,
    tuple_into,
)

logger = logging.getLogger(__name__)


# =============================================================================
# DIAGRAM MODEL
# =============================================================================


class DiagramArrow(BaseModel):
    """Структурная стрелка диаграммы между объектами с метками source/target."""

    name: str = Field(..., min_length=1, description="Имя стрелки")
    source: str = Field(..., description="Метка объекта-источника")
    target: str = Field(..., description="Метка объекта-цели")
    arrow: FinArrow = Field(..., description="Стрелка FinSet")

    model_config = {"frozen": True}


class FiniteDiagram(BaseModel):
    """
    Конечная диаграмма: упорядоченные метки, объекты по меткам и
    список структурных стрелок.

    Раз построенная, диаграмма согласована: каждая стрелка соединяет
    *те же* объекты, что стоят за её метками.
    """

    labels: Tuple[str, ...] = Field(..., description="Упорядоченный набор меток")
    objects: Dict[str, FinObj] = Field(..., description="Метка → объект")
    arrows: Tuple[DiagramArrow, ...] = Field(default=(), description="Структурные стрелки")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_consistency(self) -> "FiniteDiagram":
        """
        Проверка согласованности меток, объектов и стрелок.

        Raises:
            MalformedDiagram: При любой несогласованности
        """
        if len(set(self.labels)) != len(self.labels):
            raise MalformedDiagram(f"duplicate labels in diagram: {list(self.labels)}")
        if set(self.labels) != set(self.objects):
            raise MalformedDiagram("diagram labels and object keys differ")

        names = set()
        for entry in self.arrows:
            if entry.name in names:
                raise MalformedDiagram(f"duplicate structure arrow name '{entry.name}'")
            names.add(entry.name)
            for role, label in (("source", entry.source), ("target", entry.target)):
                if label not in self.objects:
                    raise MalformedDiagram(f"arrow '{entry.name}' has unknown {role} label '{label}'")
            if entry.arrow.source is not self.objects[entry.source]:
                raise MalformedDiagram(
                    f"arrow '{entry.name}' domain is not the object labelled '{entry.source}'"
                )
            if entry.arrow.target is not self.objects[entry.target]:
                raise MalformedDiagram(
                    f"arrow '{entry.name}' codomain is not the object labelled '{entry.target}'"
                )
        return self

    @classmethod
    def from_hom_sets(
        cls,
        labels: Sequence[str],
        objects: Mapping[str, FinObj],
        hom: Mapping[Tuple[str, str], Sequence[FinArrow]],
    ) -> "FiniteDiagram":
        """
        Диаграмма из формы «для каждой упорядоченной пары — конечное множество стрелок».

        Стрелки получают имена вида 'i->j#n'.

        Raises:
            MalformedDiagram: Если пара ссылается на неизвестную метку
        """
        arrows: List[DiagramArrow] = []
        for (source, target), family in hom.items():
            for n, arrow in enumerate(family):
                arrows.append(
                    DiagramArrow(name=f"{source}->{target}#{n}", source=source, target=target, arrow=arrow)
                )
        return cls(labels=tuple(labels), objects=dict(objects), arrows=tuple(arrows))

    def obj(self, label: str) -> FinObj:
        return self.objects[label]


# =============================================================================
# LIMIT
# =============================================================================


def _check_leg_family(
    diagram: FiniteDiagram,
    apex: FinObj,
    legs: Mapping[str, FinArrow],
    outgoing: bool,
) -> Optional[str]:
    """Причина отказа для семьи legs неправильной формы, иначе None."""
    for label in diagram.labels:
        leg = legs.get(label)
        if leg is None:
            return f"missing leg for '{label}'"
        start, end = (leg.source, leg.target) if outgoing else (leg.target, leg.source)
        if start is not apex:
            return f"leg '{label}' does not {'start' if outgoing else 'end'} at the apex"
        if end is not diagram.objects[label]:
            return f"leg '{label}' does not {'end' if outgoing else 'start'} at the object labelled '{label}'"
    return None


@dataclass(frozen=True)
class LimitWitness:
    """Предел диаграммы: apex, legs и внутренние product/equalizer."""

    diagram: FiniteDiagram
    apex: FinObj
    legs: Mapping[str, FinArrow]
    product: Optional[ProductWitness]
    equalizer: Optional[EqualizerWitness]
    left: Optional[FinArrow]
    right: Optional[FinArrow]

    def factor_cone(self, apex: FinObj, legs: Mapping[str, FinArrow]) -> FactorResult:
        """
        Единственный медиатор из кандидат-конуса в предел.

        Returns:
            FactorResult; factored=False с причиной если конус неправильной
            формы или не коммутирует
        """
        reason = _check_leg_family(self.diagram, apex, legs, outgoing=True)
        if reason is not None:
            return FactorResult.failure(reason)

        for entry in self.diagram.arrows:
            if not equal_arrow(compose(entry.arrow, legs[entry.source]), legs[entry.target]):
                return FactorResult.failure(f"cone does not commute with '{entry.name}'")

        if self.product is None:
            return FactorResult.success(terminate(apex))

        candidate = tuple_into(apex, [legs[label] for label in self.diagram.labels], self.product.obj)
        return factor_through_equalizer(self.left, self.right, self.equalizer.inclusion, candidate)


def finite_limit(diagram: FiniteDiagram, limits: Optional[KernelLimits] = None) -> LimitWitness:
    """
    Предел конечной диаграммы через product + equalizer.

    Пустая диаграмма → терминальный объект.

    Raises:
        CarrierTooLarge: Если product объектов или целей превышает лимиты
    """
    limits = limits or DEFAULT_LIMITS
    if not diagram.labels:
        return LimitWitness(
            diagram=diagram, apex=TERMINAL, legs={}, product=None, equalizer=None, left=None, right=None
        )

    ensure_within(len(diagram.arrows), limits.max_diagram_arrows, "diagram arrows")
    prod = product([diagram.objects[label] for label in diagram.labels], limits)
    projection = dict(zip(diagram.labels, prod.projections))

    targets = product([diagram.objects[entry.target] for entry in diagram.arrows], limits)
    left = tuple_into(
        prod.obj,
        [compose(entry.arrow, projection[entry.source]) for entry in diagram.arrows],
        targets.obj,
    )
    right = tuple_into(prod.obj, [projection[entry.target] for entry in diagram.arrows], targets.obj)

    eq = equalizer(left, right)
    legs = {label: compose(projection[label], eq.inclusion) for label in diagram.labels}
    logger.debug(
        "finite_limit: %d objects, %d arrows, product %d -> limit %d",
        len(diagram.labels),
        len(diagram.arrows),
        prod.obj.size,
        eq.obj.size,
    )
    return LimitWitness(
        diagram=diagram, apex=eq.obj, legs=legs, product=prod, equalizer=eq, left=left, right=right
    )


# =============================================================================
# COLIMIT
# =============================================================================


@dataclass(frozen=True)
class ColimitWitness:
    """Копредел диаграммы: apex, legs и внутренние coproduct/coequalizer."""

    diagram: FiniteDiagram
    apex: FinObj
    legs: Mapping[str, FinArrow]
    coproduct: Optional[CoproductWitness]
    coequalizer: Optional[CoequalizerWitness]

    def factor_cocone(self, apex: FinObj, legs: Mapping[str, FinArrow]) -> FactorResult:
        """
        Единственный медиатор из копредела в кандидат-коконус.

        Returns:
            FactorResult; factored=False с причиной если коконус неправильной
            формы или не коммутирует
        """
        reason = _check_leg_family(self.diagram, apex, legs, outgoing=False)
        if reason is not None:
            return FactorResult.failure(reason)

        for entry in self.diagram.arrows:
            if not equal_arrow(compose(legs[entry.target], entry.arrow), legs[entry.source]):
                return FactorResult.failure(f"cocone does not commute with '{entry.name}'")

        if self.coproduct is None:
            return FactorResult.success(initial_arrow(apex))

        candidate = cotuple(self.coproduct.obj, [legs[label] for label in self.diagram.labels], apex)
        return factor_through_coequalizer(self.coequalizer.quotient, candidate)


def finite_colimit(diagram: FiniteDiagram, limits: Optional[KernelLimits] = None) -> ColimitWitness:
    """
    Копредел конечной диаграммы через coproduct + coequalizer.

    Пустая диаграмма → начальный (пустой) объект.
    """
    limits = limits or DEFAULT_LIMITS
    if not diagram.labels:
        return ColimitWitness(diagram=diagram, apex=INITIAL, legs={}, coproduct=None, coequalizer=None)

    ensure_within(len(diagram.arrows), limits.max_diagram_arrows, "diagram arrows")
    coprod = coproduct([diagram.objects[label] for label in diagram.labels])
    injection = dict(zip(diagram.labels, coprod.injections))

    sources = coproduct([diagram.objects[entry.source] for entry in diagram.arrows])
    left = cotuple(
        sources.obj,
        [compose(injection[entry.target], entry.arrow) for entry in diagram.arrows],
        coprod.obj,
    )
    right = cotuple(sources.obj, [injection[entry.source] for entry in diagram.arrows], coprod.obj)

    coeq = coequalizer(left, right)
    legs = {label: compose(coeq.quotient, injection[label]) for label in diagram.labels}
    logger.debug(
        "finite_colimit: %d objects, %d arrows, coproduct %d -> colimit %d",
        len(diagram.labels),
        len(diagram.arrows),
        coprod.obj.size,
        coeq.obj.size,
    )
    return ColimitWitness(diagram=diagram, apex=coeq.obj, legs=legs, coproduct=coprod, coequalizer=coeq)


# =============================================================================
# CONTRACTS
# =============================================================================


def arrow_from_contract(data: Dict[str, Any], source: FinObj, target: FinObj) -> FinArrow:
    """
    Стрелка из JSON-документа finset_arrow.

    Raises:
        jsonschema.ValidationError: Если документ не соответствует схеме
        ShapeMismatch: Если заявленные размеры не совпадают с source/target
    """
    validate_arrow(data)
    if data["domain_size"] != source.size or data["codomain_size"] != target.size:
        raise ShapeMismatch(
            f"contract sizes {data['domain_size']}->{data['codomain_size']} do not match "
            f"{source!r} -> {target!r}"
        )
    return make_arrow(source, target, data["mapping"])


def diagram_from_contract(data: Dict[str, Any]) -> FiniteDiagram:
    """
    FiniteDiagram из JSON-документа finset_diagram.

    Каждый объект документа становится новым FinObj; стрелки ссылаются на
    объекты по меткам. Стрелки без имени получают имя 'source->target#n'.

    Raises:
        jsonschema.ValidationError: Если документ не соответствует схеме
        MalformedDiagram: Если метки повторяются или стрелка ссылается на неизвестную метку
        pydantic.ValidationError: Если mapping стрелки нарушает инварианты
    """
    validate_diagram(data)

    objects: Dict[str, FinObj] = {}
    labels: List[str] = []
    for entry in data["objects"]:
        label = entry["label"]
        if label in objects:
            raise MalformedDiagram(f"duplicate object label '{label}' in contract")
        objects[label] = make_obj(entry["elements"], label=label)
        labels.append(label)

    arrows: List[DiagramArrow] = []
    for n, entry in enumerate(data["arrows"]):
        source, target = entry["source"], entry["target"]
        if source not in objects or target not in objects:
            raise MalformedDiagram(f"contract arrow {n} references an unknown label")
        arrows.append(
            DiagramArrow(
                name=entry.get("name", f"{source}->{target}#{n}"),
                source=source,
                target=target,
                arrow=make_arrow(objects[source], objects[target], entry["mapping"]),
            )
        )

    return FiniteDiagram(labels=tuple(labels), objects=objects, arrows=tuple(arrows))
