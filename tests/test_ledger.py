import asyncio
from decimal import Decimal

import pytest

from groupledger.core.exceptions import Conflict, InvalidArgument, NotFound, Unauthorized
from groupledger.schemas.balances import Transfer
from groupledger.services.expense_services import create_expense, delete_expense, get_expenses
from groupledger.services.group_services import (
    add_member,
    create_group,
    delete_group,
    get_group,
    remove_member,
    verify_group_balances,
)
from groupledger.services.payment_services import create_payment, delete_payment, get_payment_by_id
from groupledger.services.settlement_service import get_aggregated_balances, get_settlement_plan

from conftest import ALICE, BOB, CAROL, DAVE

D = Decimal


def equal_split(*users):
    return [{"user_id": u, "share": 1, "share_type": "equal"} for u in users]


async def balances(db, group_id):
    group = await get_group(db, group_id, ALICE)
    return {m.user_id: m.balance for m in group.members}


async def test_new_group_starts_at_zero(db, trio):
    group = await get_group(db, trio, ALICE)

    assert [m.user_id for m in group.members] == [ALICE, BOB, CAROL]
    assert all(m.balance == 0 for m in group.members)
    assert group.total_expenses == 0
    assert group.created_by == ALICE


async def test_equal_expense_and_plan(db, trio):
    expense = await create_expense(db, trio, ALICE, "Groceries", "300", equal_split(ALICE, BOB, CAROL))

    assert [s["share"] for s in expense.split_between] == [D("100.00")] * 3
    assert [s["is_paid"] for s in expense.split_between] == [True, False, False]
    assert await balances(db, trio) == {ALICE: D("200"), BOB: D("-100"), CAROL: D("-100")}

    plan = await get_settlement_plan(db, trio, BOB)
    assert plan == [
        Transfer(from_user=BOB, to_user=ALICE, amount=D("100")),
        Transfer(from_user=CAROL, to_user=ALICE, amount=D("100")),
    ]

    group = await get_group(db, trio, ALICE)
    assert group.total_expenses == D("300")


async def test_payment_after_expense(db, trio):
    await create_expense(db, trio, ALICE, "Groceries", "300", equal_split(ALICE, BOB, CAROL))
    payment = await create_payment(db, trio, BOB, ALICE, "100")

    assert payment.description == "Balance settlement"
    assert await balances(db, trio) == {ALICE: D("100"), BOB: D("0"), CAROL: D("-100")}
    assert await get_settlement_plan(db, trio, ALICE) == [
        Transfer(from_user=CAROL, to_user=ALICE, amount=D("100")),
    ]


async def test_percentage_expense_and_its_deletion(db, trio):
    await create_expense(db, trio, BOB, "Taxi", "12.34", equal_split(BOB, CAROL))
    before = await balances(db, trio)

    expense = await create_expense(
        db,
        trio,
        ALICE,
        "Dinner",
        D("150"),
        [
            {"user_id": ALICE, "share": 50, "share_type": "percentage"},
            {"user_id": BOB, "share": 30, "share_type": "percentage"},
            {"user_id": CAROL, "share": 20, "share_type": "percentage"},
        ],
    )
    assert [s["share"] for s in expense.split_between] == [D("75.00"), D("45.00"), D("30.00")]

    after = await balances(db, trio)
    assert after[ALICE] - before[ALICE] == D("75.00")
    assert after[BOB] - before[BOB] == D("-45.00")
    assert after[CAROL] - before[CAROL] == D("-30.00")

    await delete_expense(db, ALICE, expense.id)

    assert await balances(db, trio) == before
    group = await get_group(db, trio, ALICE)
    assert group.total_expenses == D("12.34")


async def test_rounded_expense_reverses_exactly(db, trio):
    before = await balances(db, trio)

    expense = await create_expense(db, trio, CAROL, "Pizza", "100", equal_split(ALICE, BOB, CAROL))
    current = await balances(db, trio)
    assert current == {ALICE: D("-33.33"), BOB: D("-33.33"), CAROL: D("66.67")}
    assert abs(sum(current.values())) <= D("0.01")

    await delete_expense(db, CAROL, expense.id)
    assert await balances(db, trio) == before


async def test_payment_delete_reverses_exactly(db, trio):
    await create_expense(db, trio, ALICE, "Fuel", "45.10", equal_split(ALICE, BOB))
    before = await balances(db, trio)

    payment = await create_payment(db, trio, BOB, ALICE, "22.55", "Fuel money")
    await delete_payment(db, payment.id, BOB)

    assert await balances(db, trio) == before


async def test_balances_stay_zero_sum_and_match_history(db, trio):
    await create_expense(db, trio, ALICE, "Rent", "1000", equal_split(ALICE, BOB, CAROL))
    await create_expense(db, trio, BOB, "Internet", "59.99", equal_split(ALICE, BOB, CAROL))
    await create_expense(
        db,
        trio,
        CAROL,
        "Cleaning",
        "80",
        [{"user_id": ALICE, "share": 2}, {"user_id": BOB, "share": 1}, {"user_id": CAROL, "share": 3}],
    )
    await create_payment(db, trio, CAROL, ALICE, "150")

    current = await balances(db, trio)
    assert abs(sum(current.values())) <= D("0.01")

    report = await verify_group_balances(db, trio, ALICE)
    assert report["consistent"] is True
    assert report["mismatches"] == []

    plan = await get_settlement_plan(db, trio, ALICE)
    for t in plan:
        current[t.from_user] += t.amount
        current[t.to_user] -= t.amount
    assert all(abs(bal) <= D("0.01") for bal in current.values())


async def test_create_expense_errors_leave_balances_untouched(db, trio):
    await create_expense(db, trio, ALICE, "Groceries", "30", equal_split(ALICE, BOB, CAROL))
    before = await balances(db, trio)

    with pytest.raises(NotFound):
        await create_expense(db, 999, ALICE, "Ghost", "10", equal_split(ALICE))
    with pytest.raises(Unauthorized):
        await create_expense(db, trio, DAVE, "Crasher", "10", equal_split(ALICE, DAVE))

    bad_inputs = [
        ("0", equal_split(ALICE, BOB)),
        ("-5", equal_split(ALICE, BOB)),
        ("10.001", equal_split(ALICE, BOB)),
        ("abc", equal_split(ALICE, BOB)),
        ("10", []),
        ("10", equal_split(ALICE, ALICE)),
        ("10", equal_split(ALICE, DAVE)),
        ("10", [{"user_id": ALICE, "share": -1, "share_type": "exact"}]),
        ("10", [{"user_id": ALICE, "share": 0}, {"user_id": BOB, "share": 0}]),
        ("10", [{"user_id": ALICE, "share": "x"}]),
    ]
    for amount, splits in bad_inputs:
        with pytest.raises(InvalidArgument):
            await create_expense(db, trio, ALICE, "Bad", amount, splits)

    with pytest.raises(InvalidArgument):
        await create_expense(db, trio, ALICE, "Bad", "10", equal_split(ALICE), category="Holidays")

    assert await balances(db, trio) == before


async def test_only_payer_deletes_expense(db, trio):
    expense = await create_expense(db, trio, ALICE, "Groceries", "30", equal_split(ALICE, BOB, CAROL))
    before = await balances(db, trio)

    # not even the group creator may delete someone else's expense
    bob_expense = await create_expense(db, trio, BOB, "Snacks", "9", equal_split(ALICE, BOB, CAROL))
    with pytest.raises(Unauthorized):
        await delete_expense(db, ALICE, bob_expense.id)
    await delete_expense(db, BOB, bob_expense.id)

    with pytest.raises(Unauthorized):
        await delete_expense(db, BOB, expense.id)
    assert await balances(db, trio) == before

    await delete_expense(db, ALICE, expense.id)
    with pytest.raises(NotFound):
        await delete_expense(db, ALICE, expense.id)


async def test_payment_errors(db, trio):
    with pytest.raises(NotFound):
        await create_payment(db, 999, BOB, ALICE, "10")
    with pytest.raises(Unauthorized):
        await create_payment(db, trio, DAVE, ALICE, "10")
    with pytest.raises(NotFound):
        await create_payment(db, trio, BOB, DAVE, "10")
    with pytest.raises(InvalidArgument):
        await create_payment(db, trio, BOB, ALICE, "0")
    with pytest.raises(InvalidArgument):
        await create_payment(db, trio, BOB, BOB, "10")

    payment = await create_payment(db, trio, BOB, ALICE, "10")
    with pytest.raises(Unauthorized):
        await delete_payment(db, payment.id, ALICE)
    with pytest.raises(Unauthorized):
        await get_payment_by_id(db, payment.id, CAROL)
    assert (await get_payment_by_id(db, payment.id, ALICE)).amount == D("10")

    await delete_payment(db, payment.id, BOB)
    with pytest.raises(NotFound):
        await delete_payment(db, payment.id, BOB)
    assert all(bal == 0 for bal in (await balances(db, trio)).values())


async def test_remove_member_guards(db, trio):
    await add_member(db, trio, DAVE, ALICE)

    with pytest.raises(Unauthorized):
        await remove_member(db, trio, DAVE, BOB)
    with pytest.raises(Conflict):
        await remove_member(db, trio, 42, ALICE)

    expense = await create_expense(db, trio, ALICE, "Tickets", "40", equal_split(ALICE, DAVE))
    await create_payment(db, trio, DAVE, ALICE, "20")
    assert (await balances(db, trio))[DAVE] == 0

    # settled up, but history still references Dave
    with pytest.raises(Conflict, match="expenses"):
        await remove_member(db, trio, DAVE, ALICE)

    await delete_expense(db, ALICE, expense.id)
    with pytest.raises(Conflict, match="payments"):
        await remove_member(db, trio, DAVE, ALICE)

    group = await get_group(db, trio, ALICE)
    assert [m.user_id for m in group.members] == [ALICE, BOB, CAROL, DAVE]


async def test_remove_clean_member(db, trio):
    await add_member(db, trio, DAVE, ALICE)
    # Dave's only record is a payment that was removed again, leaving him clean
    payment = await create_payment(db, trio, DAVE, BOB, "5")
    await delete_payment(db, payment.id, DAVE)

    group = await remove_member(db, trio, DAVE, ALICE)
    assert [m.user_id for m in group.members] == [ALICE, BOB, CAROL]

    with pytest.raises(Conflict):
        await remove_member(db, trio, DAVE, ALICE)


async def test_remove_member_with_outstanding_balance(db, trio):
    group = await add_member(db, trio, DAVE, ALICE)
    # drift that no expense or payment explains
    group.member_for(DAVE).balance = D("0.01")
    await db.commit()

    with pytest.raises(Conflict, match="outstanding balance"):
        await remove_member(db, trio, DAVE, ALICE)

    assert (await balances(db, trio))[DAVE] == D("0.01")


async def test_add_member_rules(db, trio):
    with pytest.raises(Unauthorized):
        await add_member(db, trio, DAVE, BOB)
    with pytest.raises(Conflict):
        await add_member(db, trio, BOB, ALICE)
    with pytest.raises(NotFound):
        await add_member(db, 999, DAVE, ALICE)

    group = await add_member(db, trio, DAVE, ALICE)
    assert group.member_for(DAVE).balance == 0


async def test_non_members_cannot_read_group_data(db, trio):
    with pytest.raises(Unauthorized):
        await get_settlement_plan(db, trio, DAVE)
    with pytest.raises(Unauthorized):
        await get_group(db, trio, DAVE)
    with pytest.raises(NotFound):
        await get_settlement_plan(db, 999, ALICE)


async def test_aggregated_balances_net_across_groups(db, trio):
    await create_expense(db, trio, ALICE, "Groceries", "300", equal_split(ALICE, BOB, CAROL))

    pair = await create_group(db, "Road trip", ALICE, category="Trip", members=[BOB])
    await create_expense(db, pair.id, BOB, "Fuel", "50", equal_split(ALICE, BOB))

    assert [(b.user_id, b.balance) for b in await get_aggregated_balances(db, ALICE)] == [
        (BOB, D("-75")),
        (CAROL, D("-100")),
    ]
    assert [(b.user_id, b.balance) for b in await get_aggregated_balances(db, BOB)] == [
        (ALICE, D("75")),
    ]
    assert await get_aggregated_balances(db, DAVE) == []


async def test_delete_group(db, trio):
    await create_expense(db, trio, ALICE, "Groceries", "30", equal_split(ALICE, BOB, CAROL))

    with pytest.raises(Unauthorized):
        await delete_group(db, trio, BOB)

    await delete_group(db, trio, ALICE)

    with pytest.raises(NotFound):
        await get_group(db, trio, ALICE)
    assert await get_expenses(db, ALICE) == []


async def test_concurrent_expenses_on_one_group_do_not_lose_updates(session_factory, trio):
    async def add(i):
        async with session_factory() as session:
            await create_expense(session, trio, ALICE, f"Round {i}", "30", equal_split(ALICE, BOB, CAROL))

    await asyncio.gather(*(add(i) for i in range(12)))

    async with session_factory() as session:
        group = await get_group(session, trio, ALICE)
        assert group.total_expenses == D("360")
        assert {m.user_id: m.balance for m in group.members} == {
            ALICE: D("240"),
            BOB: D("-120"),
            CAROL: D("-120"),
        }

        report = await verify_group_balances(session, trio, ALICE)
        assert report["consistent"] is True


async def test_rejected_operations_keep_returned_objects_usable(db, trio):
    expense = await create_expense(db, trio, ALICE, "Lunch", "30", equal_split(ALICE, BOB, CAROL))
    payment = await create_payment(db, trio, BOB, ALICE, "10")

    with pytest.raises(Unauthorized):
        await delete_payment(db, payment.id, CAROL)
    with pytest.raises(Conflict):
        await remove_member(db, trio, BOB, ALICE)
    with pytest.raises(NotFound):
        await create_payment(db, 999, BOB, ALICE, "10")

    assert expense.description == "Lunch"
    assert [s["share"] for s in expense.split_between] == [D("10.00")] * 3
    assert payment.amount == D("10.00")
    assert (await get_payment_by_id(db, payment.id, ALICE)).paid_to == ALICE


async def test_oversized_shares_are_rejected(db, trio):
    before = await balances(db, trio)

    for share_type in ("exact", "percentage", "equal"):
        with pytest.raises(InvalidArgument, match="too large"):
            await create_expense(
                db, trio, ALICE, "Bad", "10",
                [{"user_id": BOB, "share": "1e30", "share_type": share_type}],
            )

    # the share itself fits, the priced charge does not
    with pytest.raises(InvalidArgument, match="largest storable amount"):
        await create_expense(
            db, trio, ALICE, "Bad", "9000000000",
            [{"user_id": BOB, "share": "9000000000", "share_type": "percentage"}],
        )

    assert await balances(db, trio) == before
