import sys
from decimal import getcontext

from waterdrop.config import create_conf
from waterdrop.models import (
    BonusLedgerEntry,
    BonusSummary,
    Config,
    TokenDescriptor,
    Writer,
)
from waterdrop.queries import (
    get_egld_balance,
    get_network_config,
    get_token_balance,
    get_token_properties,
)
from waterdrop.rewards import aggregate, allocate_bonus
from waterdrop.transfers import build_transfers, preflight_check
from waterdrop.utils import yes_or_no

getcontext().prec = 42


def add_token_balances(
    ledger: list[BonusLedgerEntry], token: TokenDescriptor
) -> list[BonusLedgerEntry]:
    return [
        entry.copy(update={"token_balance": get_token_balance(entry.address, token)})
        for entry in ledger
    ]


def write_report(
    writer: Writer,
    conf: Config,
    ledger: list[BonusLedgerEntry],
    summary: BonusSummary,
) -> None:
    writer.to_json(conf, "config")
    writer.to_json(summary, "summary")
    writer.to_csv_and_json(ledger, [e.to_row() for e in ledger], "ledger")
    print(f"📝 Report exported to {writer.path}")


def run(path_to_config: str) -> bool:
    """
    Compute the bonus for every delegator and, once confirmed and funded,
    write the transfer payloads. Returns False if the operator backs out.
    """
    conf = create_conf(path_to_config)
    writer = Writer(conf)

    network = get_network_config()
    token = get_token_properties(conf.bonus_token)

    print(f"⚗ Replaying delegations to {conf.staking_sc}...")
    state = aggregate(conf, network)

    ledger, summary = allocate_bonus(
        state, conf.bonus_amount, conf.per_staked_amount, token.ticker
    )
    if conf.with_token_balances:
        ledger = add_token_balances(ledger, token)

    write_report(writer, conf, ledger, summary)

    if not yes_or_no(
        f"You are about to send {summary.total_bonus} {token.ticker} "
        f"to {summary.recipients} delegators. Continue ?"
    ):
        return False

    preflight_check(
        get_egld_balance(conf.bonus_wallet, network.denomination),
        get_token_balance(conf.bonus_wallet, token),
        summary,
    )

    transfers = build_transfers(ledger, token)
    writer.to_json(transfers, "transfers")
    print(f"😃 {len(transfers)} transfers ready to sign in {writer.json_path}")
    return True


def main() -> None:
    path = sys.argv[1] if len(sys.argv) > 1 else "config.json"
    if not run(path):
        sys.exit(1)


if __name__ == "__main__":
    main()
