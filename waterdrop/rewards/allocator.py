from decimal import ROUND_FLOOR, Decimal

from waterdrop.models import BonusLedgerEntry, BonusSummary
from waterdrop.rewards.aggregator import DelegationState


def compute_bonus(average: Decimal, bonus_amount: int, per_staked_amount: int) -> int:
    """`bonus_amount` whole tokens per `per_staked_amount` of average stake, rounded down"""
    bonus = Decimal(bonus_amount) * average / Decimal(per_staked_amount)
    return int(bonus.to_integral_value(rounding=ROUND_FLOOR))


def allocate_bonus(
    state: DelegationState,
    bonus_amount: int,
    per_staked_amount: int,
    token: str,
) -> tuple[list[BonusLedgerEntry], BonusSummary]:
    """
    Turn the replayed state into the bonus ledger.

    Accounts whose final balance is negative have unstaked more than we saw them stake.
    They are left out entirely, whatever their history, as are negative averages.

    :param `state`: output of the aggregator, `windows` must be at least 1
    :param `bonus_amount`: bonus tokens paid per `per_staked_amount` of average stake
    :param `token`: bonus token identifier, for the summary
    """
    if state.windows < 1:
        raise ValueError("Cannot average over zero windows")

    windows = Decimal(state.windows)
    ledger: list[BonusLedgerEntry] = []
    for account, total in state.sums.items():
        balance = state.balances.get(account, Decimal(0))
        if balance < 0:
            continue
        average = total / windows
        if average < 0:
            continue
        ledger.append(
            BonusLedgerEntry(
                address=account,
                average_stake=average,
                current_balance=balance,
                bonus=compute_bonus(average, bonus_amount, per_staked_amount),
            )
        )

    summary = BonusSummary(
        token=token,
        total_bonus=sum(e.bonus for e in ledger),
        recipients=len(ledger),
        windows=state.windows,
    )
    return ledger, summary
