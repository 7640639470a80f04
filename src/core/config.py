"""
Конфигурация ядра: ограничения на комбинаторный взрыв.

Product растёт как ∏|A_i|, exponential — как |Y|^|S|. Ядро корректно только
для малых carrier; вызывающий код задаёт границы через KernelLimits.
"""

from dataclasses import dataclass
from typing import Final

from src.core.domain.errors import CarrierTooLarge


@dataclass(frozen=True)
class KernelLimits:
    """Верхние границы размеров строящихся объектов.

    - max_product_size: размер carrier любого product
    - max_exponential_size: размер carrier любого exponential (|Y|^|S|)
    - max_diagram_arrows: число структурных стрелок в конечной диаграмме
    """

    max_product_size: int = 1_000_000
    max_exponential_size: int = 250_000
    max_diagram_arrows: int = 4_096

    def __post_init__(self):
        for name in ("max_product_size", "max_exponential_size", "max_diagram_arrows"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")


DEFAULT_LIMITS: Final[KernelLimits] = KernelLimits()


def ensure_within(size: int, bound: int, what: str) -> None:
    """
    Проверка размера до начала перечисления.

    Raises:
        CarrierTooLarge: Если size > bound
    """
    if size > bound:
        raise CarrierTooLarge(f"{what} would have {size} elements, limit is {bound}")
