"""Consumption Simulator (pure part) — target selection and depletion decision.

Invariants:
    - Selection is uniform per level: facility, then department, then item
    - Empty network / facility / department -> no target (tick is a no-op)
    - Depletion only when quantity > 0 AND the draw falls under the probability
    - The random source is injected: same seed, same sequence of decisions

Design Decisions:
    - Pure planning separated from scheduling: the sync engine owns the interval and
      applies the planned delta through the same entry point as user mutations
    - The probability draw happens only for in-stock items, so an empty item
      consumes fewer random numbers than a stocked one
"""

import random
from dataclasses import dataclass

from medsync.core.network_model import Department, Facility, Item, Network

DEPLETION_DELTA: int = -1


@dataclass(frozen=True)
class ConsumptionTarget:
    facility: Facility
    department: Department
    item: Item


def select_target(
    network: Network, rng: random.Random,
) -> ConsumptionTarget | None:
    """Pick one item uniformly at each level of the tree."""
    if not network.facilities:
        return None
    facility = network.facilities[rng.randrange(len(network.facilities))]
    if not facility.departments:
        return None
    department = facility.departments[rng.randrange(len(facility.departments))]
    if not department.inventory:
        return None
    item = department.inventory[rng.randrange(len(department.inventory))]
    return ConsumptionTarget(facility, department, item)


def plan_depletion(
    network: Network, rng: random.Random, probability: float,
) -> ConsumptionTarget | None:
    """Return the item to deplete this tick, or None to skip."""
    target = select_target(network, rng)
    if target is None or target.item.quantity <= 0:
        return None
    if rng.random() >= probability:
        return None
    return target
