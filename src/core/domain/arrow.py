"""
FinArrow — Стрелка категории конечных множеств

Тотальная функция между двумя carrier-объектами, представленная
последовательностью индексов: mapping[i] — индекс образа i-го элемента domain.

ИНВАРИАНТЫ (проверяются при конструировании):
1. len(mapping) == source.size
2. 0 <= mapping[i] < target.size для всех i

Композиция g∘f требует, чтобы f.target был *тем же* объектом, что g.source.
"""

from typing import List, Tuple

from pydantic import BaseModel, Field, field_validator

from src.core.domain.carrier import INITIAL, TERMINAL, FinObj
from src.core.domain.errors import IndexOutOfRange, NotMonomorphism, ShapeMismatch


# =============================================================================
# FINARROW MODEL
# =============================================================================


class FinArrow(BaseModel):
    """
    Стрелка source → target.

    Immutable модель (frozen=True). Равенство `==` совпадает с equal_arrow:
    те же объекты source/target (по идентичности) и поточечно равный mapping.
    """

    source: FinObj = Field(..., description="Domain")
    target: FinObj = Field(..., description="Codomain")
    mapping: Tuple[int, ...] = Field(..., description="Индексы образов в target")

    model_config = {"frozen": True}

    @field_validator("mapping")
    @classmethod
    def validate_mapping(cls, v: Tuple[int, ...], info) -> Tuple[int, ...]:
        """Проверка тотальности и попадания образов в target."""
        source = info.data.get("source")
        target = info.data.get("target")
        if source is None or target is None:
            return v

        if len(v) != source.size:
            raise ValueError(
                f"mapping length {len(v)} does not match domain size {source.size}"
            )
        for position, image in enumerate(v):
            if image < 0 or image >= target.size:
                raise ValueError(
                    f"image {image} of domain index {position} is out of range "
                    f"for codomain of size {target.size}"
                )
        return v

    def __call__(self, index: int) -> int:
        """Образ domain-индекса."""
        return self.mapping[index]

    def __repr__(self) -> str:
        return f"FinArrow({self.source!r} -> {self.target!r}, {list(self.mapping)})"


def make_arrow(source: FinObj, target: FinObj, mapping) -> FinArrow:
    """
    Конструктор стрелки из любой последовательности индексов.

    Raises:
        pydantic.ValidationError: Если mapping нарушает инварианты
    """
    return FinArrow(source=source, target=target, mapping=tuple(mapping))


# =============================================================================
# КАТЕГОРНЫЕ ОПЕРАЦИИ
# =============================================================================


def identity(obj: FinObj) -> FinArrow:
    """Тождественная стрелка: mapping[i] = i."""
    return FinArrow(source=obj, target=obj, mapping=tuple(obj.indices()))


def compose(g: FinArrow, f: FinArrow) -> FinArrow:
    """
    Композиция g∘f: i ↦ g[f[i]].

    Args:
        g: Вторая стрелка (применяется после f)
        f: Первая стрелка

    Returns:
        Стрелка f.source → g.target

    Raises:
        ShapeMismatch: Если f.target не тот же объект, что g.source
    """
    if f.target is not g.source:
        raise ShapeMismatch(
            f"compose: codomain {f.target!r} of the first arrow is not the domain "
            f"{g.source!r} of the second"
        )
    outer = g.mapping
    return FinArrow(
        source=f.source,
        target=g.target,
        mapping=tuple(outer[i] for i in f.mapping),
    )


def equal_arrow(f: FinArrow, g: FinArrow) -> bool:
    """Те же source/target объекты и поточечно равные mapping."""
    return f.source is g.source and f.target is g.target and f.mapping == g.mapping


def is_identity(f: FinArrow) -> bool:
    """True если f — тождество (source и target совпадают)."""
    return f.source is f.target and all(image == i for i, image in enumerate(f.mapping))


# =============================================================================
# МОНО / ЭПИ / ИЗО
# =============================================================================


def is_monic(f: FinArrow) -> bool:
    """Инъективность mapping. O(n) через seen-set."""
    seen = set()
    for image in f.mapping:
        if image in seen:
            return False
        seen.add(image)
    return True


def is_epic(f: FinArrow) -> bool:
    """Каждый codomain-индекс имеет прообраз. O(n + m)."""
    hit = [False] * f.target.size
    for image in f.mapping:
        hit[image] = True
    return all(hit)


def is_iso(f: FinArrow) -> bool:
    """Биекция."""
    return f.source.size == f.target.size and is_monic(f)


def ensure_monic(f: FinArrow, context: str = "arrow") -> None:
    """
    Raises:
        NotMonomorphism: Если f не инъективна
    """
    if not is_monic(f):
        raise NotMonomorphism(f"{context}: expected a monomorphism, got {list(f.mapping)}")


def inverse(f: FinArrow) -> FinArrow:
    """
    Обратная стрелка для биекции.

    Raises:
        NotMonomorphism: Если f не биекция
    """
    if not is_iso(f):
        raise NotMonomorphism(f"inverse: arrow {list(f.mapping)} is not a bijection")
    back = [0] * f.target.size
    for position, image in enumerate(f.mapping):
        back[image] = position
    return FinArrow(source=f.target, target=f.source, mapping=tuple(back))


def image(f: FinArrow) -> List[int]:
    """Image support: отсортированные codomain-индексы, в которые попадает f."""
    return sorted(set(f.mapping))


# =============================================================================
# ТЕРМИНАЛЬНЫЙ / НАЧАЛЬНЫЙ ОБЪЕКТЫ И ТОЧКИ
# =============================================================================


def terminate(obj: FinObj) -> FinArrow:
    """Единственная стрелка obj → 1."""
    return FinArrow(source=obj, target=TERMINAL, mapping=(0,) * obj.size)


def initial_arrow(obj: FinObj) -> FinArrow:
    """Единственная стрелка 0 → obj."""
    return FinArrow(source=INITIAL, target=obj, mapping=())


def point(obj: FinObj, index: int) -> FinArrow:
    """
    Глобальный элемент 1 → obj, выбирающий index.

    Raises:
        IndexOutOfRange: Если index вне carrier
    """
    if index < 0 or index >= obj.size:
        raise IndexOutOfRange(f"point: index {index} out of range for {obj!r}")
    return FinArrow(source=TERMINAL, target=obj, mapping=(index,))


def point_index(obj: FinObj, arrow: FinArrow) -> int:
    """
    Индекс, выбранный глобальным элементом arrow: 1 → obj.

    Raises:
        ShapeMismatch: Если arrow не является стрелкой 1 → obj
    """
    if arrow.source is not TERMINAL:
        raise ShapeMismatch("point_index: arrow must originate at the terminal object")
    if arrow.target is not obj:
        raise ShapeMismatch("point_index: arrow codomain must be the supplied object")
    return arrow.mapping[0]
