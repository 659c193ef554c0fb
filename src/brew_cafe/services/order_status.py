from brew_cafe.models.order import OrderStatusEnum

# линейный порядок статусов, только вперёд и только на один шаг
STATUS_FLOW = (
    OrderStatusEnum.pending,
    OrderStatusEnum.preparing,
    OrderStatusEnum.ready,
    OrderStatusEnum.served,
)

TERMINAL_STATUSES = frozenset({OrderStatusEnum.served})

ACTIVE_STATUSES = tuple(s for s in STATUS_FLOW if s not in TERMINAL_STATUSES)


def next_status(current) -> OrderStatusEnum:
    """
    Следующий статус заказа. Для конечного статуса возвращает его же.
    """
    current = OrderStatusEnum(current)
    if current in TERMINAL_STATUSES:
        return current
    return STATUS_FLOW[STATUS_FLOW.index(current) + 1]


def can_transition(current, target) -> bool:
    current = OrderStatusEnum(current)
    target = OrderStatusEnum(target)
    return current not in TERMINAL_STATUSES and next_status(current) == target
