"""Property checks over a finished exchange computation."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from tradecycles.core.types import TradeType
from tradecycles.market.exchange import ExchangeResult


@dataclass
class CheckResult:
    valid: bool
    violations: list[str] = field(default_factory=list)


def check_exchange(result: ExchangeResult) -> CheckResult:
    """Check the allocation and trade invariants of *result*.

    Returns a ``CheckResult`` with *valid=True* when every check passes;
    otherwise *violations* lists one message per failed check.
    """
    graph = result.graph
    allocation = result.allocation
    ids = set(graph.item_ids())
    violations: list[str] = []

    # ── allocation ───────────────────────────────────────────────────────
    if set(allocation) != ids:
        violations.append("allocation keys differ from the item set")
    if sorted(allocation.values()) != sorted(ids):
        violations.append("allocation is not a permutation of the item set")
    if result.round_count > len(ids):
        violations.append(
            f"{result.round_count} rounds for {len(ids)} items"
        )

    members = Counter(
        item for r in result.allocation_result.rounds
        for cycle in r.cycles for item in cycle
    )
    if set(members) != ids or any(n != 1 for n in members.values()):
        violations.append("round cycles do not partition the item set")

    # ── trades ───────────────────────────────────────────────────────────
    for trade in result.trades:
        n = len(trade.chain)
        if n < 2:
            violations.append(f"trade {trade.trade_id} has {n} step(s)")
        expected = TradeType.DIRECT if n == 2 else TradeType.CIRCULAR
        if trade.trade_type != expected:
            violations.append(
                f"trade {trade.trade_id} with {n} steps typed {trade.trade_type.value}"
            )
        for step in trade.chain:
            if step.item == step.receiver_item:
                violations.append(f"trade {trade.trade_id} contains a self-loop")
            elif step.item not in graph[step.receiver_item].preferences:
                violations.append(
                    f"trade {trade.trade_id}: {step.receiver_item} does not "
                    f"want {step.item}"
                )
            if graph.owner_of(step.item) != step.giver:
                violations.append(
                    f"trade {trade.trade_id}: {step.giver} does not own {step.item}"
                )
            if graph.owner_of(step.receiver_item) != step.receiver:
                violations.append(
                    f"trade {trade.trade_id}: {step.receiver} does not own "
                    f"{step.receiver_item}"
                )

    # ── owner partition ──────────────────────────────────────────────────
    covered = {o for t in result.trades for o in t.participants}
    covered.update(graph.owner_of(i) for i in result.allocation_result.kept_items)
    if covered != set(graph.owners()):
        violations.append("trade participants and keepers do not cover all owners")

    return CheckResult(not violations, violations)
