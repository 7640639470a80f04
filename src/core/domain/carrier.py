"""
FinObj — Carrier-объект категории конечных множеств

Immutable Pydantic модель: упорядоченная конечная последовательность
непрозрачных элементов. Наблюдаемы только размер и позиция (индекс) элемента.

ИНВАРИАНТЫ:
1. Идентичность объекта — идентичность Python-объекта (`is`), а не равенство
   содержимого. Два carrier с одинаковыми элементами — разные объекты.
2. Lookup-таблица элемент → индекс строится один раз при конструировании
   и больше не изменяется. Ключи структурные (кортежи), не сериализованные строки.
3. Product-объект помнит свои множители (тоже фиксируются при построении),
   поэтому tupling проверяет codomain каждого leg по идентичности.
"""

from types import MappingProxyType
from typing import Any, Final, Hashable, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, PrivateAttr

from src.core.domain.errors import IndexOutOfRange, KernelContractViolation


# =============================================================================
# FINOBJ MODEL
# =============================================================================


class FinObj(BaseModel):
    """
    Конечный carrier-объект.

    Immutable модель (frozen=True). Сравнение `==` — по идентичности объекта:
    композиция и tupling требуют *тот же* объект, а не объект той же формы.
    """

    elements: Tuple[Any, ...] = Field(default=(), description="Упорядоченные элементы carrier")
    label: Optional[str] = Field(None, description="Необязательное имя для диагностики")

    model_config = {"frozen": True}

    # Lookup элемент → индекс, принадлежит объекту
    _lookup: Optional[Mapping[Hashable, int]] = PrivateAttr(default=None)
    # Множители, если объект построен как product
    _factors: Optional[Tuple[Any, ...]] = PrivateAttr(default=None)

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        name = self.label or "FinObj"
        return f"{name}(size={self.size})"

    @property
    def size(self) -> int:
        """Мощность carrier."""
        return len(self.elements)

    def indices(self) -> range:
        """Диапазон позиций [0, size)."""
        return range(len(self.elements))

    @property
    def is_indexed(self) -> bool:
        """True если объект построен с lookup-таблицей."""
        return self._lookup is not None

    def index_of(self, key: Hashable) -> int:
        """
        Позиция элемента по структурному ключу.

        Args:
            key: Структурный ключ (для product — кортеж координат,
                 для exponential — кортеж образов)

        Returns:
            Индекс в carrier

        Raises:
            KernelContractViolation: Если объект построен без lookup-таблицы
            IndexOutOfRange: Если ключ отсутствует в carrier
        """
        if self._lookup is None:
            raise KernelContractViolation(
                f"{self!r} carries no element index; build it through a kernel constructor"
            )
        try:
            return self._lookup[key]
        except KeyError:
            raise IndexOutOfRange(f"{key!r} is not present in the carrier of {self!r}") from None

    def __contains__(self, key: object) -> bool:
        return self._lookup is not None and key in self._lookup

    @property
    def factors(self) -> Optional[Tuple["FinObj", ...]]:
        """Множители product (None для объектов, построенных не через product)."""
        return self._factors


# =============================================================================
# КОНСТРУКТОРЫ
# =============================================================================


def make_obj(elements: Iterable[Any], label: Optional[str] = None) -> FinObj:
    """
    Создание carrier без lookup-таблицы.

    Args:
        elements: Элементы (любые, в том числе нехэшируемые)
        label: Имя для диагностики

    Returns:
        Новый FinObj
    """
    return FinObj(elements=tuple(elements), label=label)


def make_indexed_obj(
    elements: Iterable[Any],
    keys: Optional[Iterable[Hashable]] = None,
    label: Optional[str] = None,
) -> FinObj:
    """
    Создание carrier с lookup-таблицей ключ → индекс.

    Args:
        elements: Элементы carrier
        keys: Структурные ключи по позициям (default: сами элементы)
        label: Имя для диагностики

    Returns:
        Новый FinObj с прикреплённым immutable lookup

    Raises:
        KernelContractViolation: Если ключи повторяются или их число не совпадает
    """
    elements = tuple(elements)
    keys = elements if keys is None else tuple(keys)
    if len(keys) != len(elements):
        raise KernelContractViolation(
            f"lookup keys ({len(keys)}) must match carrier size ({len(elements)})"
        )

    lookup = {}
    for position, key in enumerate(keys):
        if key in lookup:
            raise KernelContractViolation(f"duplicate lookup key {key!r} in carrier")
        lookup[key] = position

    obj = FinObj(elements=elements, label=label)
    obj._lookup = MappingProxyType(lookup)
    return obj


# =============================================================================
# ФИКСИРОВАННЫЕ ОБЪЕКТЫ
# =============================================================================

# Терминальный объект 1 (единственный элемент)
TERMINAL: Final[FinObj] = make_indexed_obj(("*",), label="1")

# Начальный объект 0 (пустой carrier)
INITIAL: Final[FinObj] = make_indexed_obj((), label="0")

# Объект истинностных значений Ω = [false, true]
TRUTH_VALUES: Final[FinObj] = make_indexed_obj((False, True), label="Ω")

FALSE_INDEX: Final[int] = 0
TRUE_INDEX: Final[int] = 1
