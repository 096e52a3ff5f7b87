from decimal import Decimal

from waterdrop.conversion import hex_encode_text, to_minor_units
from waterdrop.errors import InsufficientFunds
from waterdrop.models import (
    BonusLedgerEntry,
    BonusSummary,
    TokenDescriptor,
    TransferPayload,
)

ESDT_TRANSFER_GAS_LIMIT = 500_000
# upper bound of the EGLD fee for a single ESDT transfer at the gas limit above
FEE_PER_TRANSFER = Decimal("0.00015")


def transfer_data(token: TokenDescriptor, bonus: int) -> str:
    amount = to_minor_units(bonus, token.decimals)
    return f"ESDTTransfer@{hex_encode_text(token.ticker)}@{amount}"


def build_transfers(
    ledger: list[BonusLedgerEntry], token: TokenDescriptor
) -> list[TransferPayload]:
    """
    One unsigned ESDT transfer per delegator owed a bonus.
    A zero amount transfer would fail on chain, so those are left out.
    """
    return [
        TransferPayload(
            receiver=entry.address,
            gas_limit=ESDT_TRANSFER_GAS_LIMIT,
            data=transfer_data(token, entry.bonus),
        )
        for entry in ledger
        if entry.bonus > 0
    ]


def required_fees(recipients: int) -> Decimal:
    return FEE_PER_TRANSFER * recipients


def preflight_check(
    egld_balance: Decimal, token_balance: Decimal, summary: BonusSummary
) -> None:
    """Refuse to go further unless the bonus wallet covers fees and bonus in full"""
    fees = required_fees(summary.recipients)
    if egld_balance < fees:
        raise InsufficientFunds(
            f"Insufficient funds. You have {egld_balance:.6f} and you need {fees:.6f} EGLD"
        )
    if token_balance < summary.total_bonus:
        raise InsufficientFunds(
            f"Insufficient funds. You have {token_balance:.2f} and you need "
            f"{summary.total_bonus:.2f} {summary.token}"
        )
