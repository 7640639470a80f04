"""
Errors — Исключения ядра конечных множеств

Два непересекающихся класса ошибок:
1. Нарушения контракта (ошибки вызывающего кода) — исключения из этого модуля.
   Несовпадение domain/codomain при композиции или tupling, индексы вне
   диапазона, не-мономорфизм в characteristic, некорректные диаграммы.
2. Неудачи факторизации кандидатов (некоммутирующие конусы/коконусы) —
   НЕ исключения, а структурированные результаты (см. results.py).
"""


class KernelContractViolation(Exception):
    """
    Базовое нарушение контракта ядра.

    Сигнализирует об ошибке вызывающего кода, а не о восстановимом состоянии.
    """

    pass


class ShapeMismatch(KernelContractViolation):
    """Объекты domain/codomain не совпадают (по идентичности объекта)."""

    pass


class IndexOutOfRange(KernelContractViolation):
    """Индекс вне диапазона carrier (тег coproduct, образ leg, номер функции)."""

    pass


class NotMonomorphism(KernelContractViolation):
    """Стрелка, которая должна быть мономорфизмом, не инъективна."""

    pass


class MalformedDiagram(KernelContractViolation):
    """Структурная стрелка диаграммы не согласована с объектами диаграммы."""

    pass


class CarrierTooLarge(KernelContractViolation):
    """
    Комбинаторный взрыв: размер product/exponential превышает KernelLimits.

    Ограничение задокументировано, это не баг: вызывающий код обязан
    ограничивать размеры carrier.
    """

    pass


class SubobjectMismatch(KernelContractViolation):
    """Два мономорфизма не представляют один и тот же подобъект."""

    pass
