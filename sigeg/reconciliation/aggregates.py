"""
Derived Aggregates

Pure functions over a tenant's current task list. They are recomputed on
every render; lists are small enough that caching buys nothing.

Invariant: total(tasks) == delivered(tasks) + pending(tasks).
"""

from typing import Iterable

from sigeg.models.task import Comparison, Task, Tenant, TenantSummary


def total(tasks: Iterable[Task]) -> int:
    return sum(task.ganancia for task in tasks)


def delivered(tasks: Iterable[Task]) -> int:
    return sum(task.ganancia for task in tasks if task.entregada)


def pending(tasks: Iterable[Task]) -> int:
    return sum(task.ganancia for task in tasks if not task.entregada)


def summarize(tenant: Tenant, tasks: list[Task]) -> TenantSummary:
    return TenantSummary(
        tenant=tenant,
        count=len(tasks),
        total=total(tasks),
        delivered=delivered(tasks),
        pending=pending(tasks),
    )


def compare(poe: TenantSummary, poisson: TenantSummary) -> Comparison:
    """
    Compare poe against poisson.

    A tie counts as poe leading.
    """
    difference = poe.total - poisson.total
    return Comparison(
        difference=difference,
        delivered_difference=poe.delivered - poisson.delivered,
        leader=Tenant.POE if difference >= 0 else Tenant.POISSON,
    )


def filter_tasks(tasks: list[Task], search: str) -> list[Task]:
    """
    Case-insensitive substring search on the assignment name or its id code.

    An empty (or blank) search returns every task.
    """
    needle = search.strip().lower()
    if not needle:
        return list(tasks)
    return [
        task for task in tasks
        if needle in task.asignacion.lower() or needle in task.id_code.lower()
    ]
