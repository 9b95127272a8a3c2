from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Dict, Iterable, List, Sequence, Tuple

getcontext().prec = 28
CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

SHARE_EQUAL = "equal"
SHARE_PERCENTAGE = "percentage"
SHARE_EXACT = "exact"


def qround(d: Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def has_cents_precision(d: Decimal) -> bool:
    return d == d.quantize(CENTS)


def charged_amount(amount: Decimal, share: Decimal, share_type: str, total_shares: Decimal) -> Decimal:
    if share_type == SHARE_EXACT:
        return share
    if share_type == SHARE_PERCENTAGE:
        return amount * share / HUNDRED
    # equal and anything unrecognised are priced by weight
    return amount * share / total_shares


def compute_shares(amount: Decimal, paid_by: int, splits: Sequence) -> List[dict]:
    """
    Prices every split entry of an expense.

    Each entry needs ``user_id``, ``share`` and ``share_type``. The returned
    ``share`` is the charged amount rounded to cents. Rounded charges are not
    reconciled against ``amount``; the payer correction in ``expense_deltas``
    keeps the group zero-sum regardless.
    """
    total_shares = sum((Decimal(s.share) for s in splits), ZERO)

    resolved = []
    for s in splits:
        charge = charged_amount(amount, Decimal(s.share), s.share_type, total_shares)
        resolved.append({
            "user_id": s.user_id,
            "share": qround(charge),
            "share_type": s.share_type,
            "is_paid": s.user_id == paid_by,
        })

    return resolved


def expense_deltas(amount: Decimal, paid_by: int, splits: Iterable) -> Dict[int, Decimal]:
    """
    Balance change per user caused by an expense with already-priced splits.

    The payer gains ``amount`` minus their own charge, every other split
    member loses their charge. Negate the result to reverse the expense.
    """
    own_charge = ZERO
    deltas: Dict[int, Decimal] = {}

    for s in splits:
        if s.user_id == paid_by:
            own_charge = s.share
        else:
            deltas[s.user_id] = deltas.get(s.user_id, ZERO) - s.share

    deltas[paid_by] = amount - own_charge
    return deltas


def payment_deltas(amount: Decimal, paid_by: int, paid_to: int) -> Dict[int, Decimal]:
    return {paid_by: amount, paid_to: -amount}


def simplify_debts(balances: Sequence[Tuple[int, Decimal]]) -> List[Tuple[int, int, Decimal]]:
    """
    Greedy largest-first matching of creditors against debtors.

    Returns (from_user, to_user, amount) transfers. Executing each one as a
    payment (from += amount, to -= amount) zeroes a zero-sum input, and at
    most n - 1 transfers are produced for n nonzero balances.
    """
    entries = [[uid, bal, idx] for idx, (uid, bal) in enumerate(balances) if bal != 0]
    # largest creditor first, largest debtor last; on ties the member listed
    # first is settled first from both ends
    entries.sort(key=lambda x: (-x[1], x[2] if x[1] > 0 else -x[2]))

    transfers: List[Tuple[int, int, Decimal]] = []
    i = 0
    j = len(entries) - 1

    while i < j:
        creditor = entries[i]
        debtor = entries[j]

        amount = min(creditor[1], -debtor[1])

        if amount > 0:
            transfers.append((debtor[0], creditor[0], qround(amount)))

        creditor[1] -= amount
        debtor[1] += amount

        if creditor[1] == 0:
            i += 1
        if debtor[1] == 0:
            j -= 1

    return transfers


def net_for_viewer(
    viewer_id: int,
    groups: Iterable[Tuple[Sequence[int], Sequence[Tuple[int, int, Decimal]]]],
) -> List[Tuple[int, Decimal]]:
    """
    Merges per-group settlement plans into one net figure per counterparty.

    ``groups`` yields (member_ids, transfers) for every group of the viewer.
    A positive result means the viewer owes the counterparty, a negative one
    means the counterparty owes the viewer.
    """
    net: Dict[int, Decimal] = {}

    for member_ids, transfers in groups:
        for uid in member_ids:
            net.setdefault(uid, ZERO)

        for from_user, to_user, amount in transfers:
            if from_user == viewer_id:
                net[to_user] = net.get(to_user, ZERO) + amount
            elif to_user == viewer_id:
                net[from_user] = net.get(from_user, ZERO) - amount

    return [
        (uid, qround(bal))
        for uid, bal in net.items()
        if uid != viewer_id and bal != 0
    ]
