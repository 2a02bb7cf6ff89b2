"""Domain layer for Pixel Empires.

Everything in here operates purely in memory:

* Dataclasses describing the empire aggregate (see :mod:`models`).
* Enumerations and the static content catalog.
* Rule configuration objects (see :mod:`rules_config`).
* The engine components: ledger, technology aggregator, queue scheduler and
  combat resolver, wired together by :class:`engine.EmpireEngine`.

Persistence and the HTTP surface are thin adapters around this package.
"""

from . import (
    catalog,
    combat,
    context,
    economy,
    engine,
    enums,
    events,
    ledger,
    models,
    queues,
    research,
    results,
    rules_config,
    setup,
    tick,
    world,
)

__all__ = [
    "catalog",
    "combat",
    "context",
    "economy",
    "engine",
    "enums",
    "events",
    "ledger",
    "models",
    "queues",
    "research",
    "results",
    "rules_config",
    "setup",
    "tick",
    "world",
]
