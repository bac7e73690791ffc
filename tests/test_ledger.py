"""
Tests for HouseholdLedger flows against the in-memory store.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from contribution_tracker.config import Settings
from contribution_tracker.ledger import (
    HouseholdLedger,
    LedgerError,
    TransactionRejectedError,
    create_ledger,
    describe_transaction,
)
from contribution_tracker.models import (
    Account,
    AccountType,
    Goal,
    NoticeOfAssessment,
    RelationshipStatus,
    Transaction,
    TransactionType,
)
from contribution_tracker.services.storage import InMemoryHouseholdStore, NotFoundError


def _transaction(account: Account, amount: str, kind=TransactionType.CONTRIBUTION, on=date(2024, 2, 15)):
    return Transaction(
        user_id=account.user_id,
        account_id=account.id,
        type=kind,
        amount=Decimal(amount),
        date=on,
    )


class TestDescribeTransaction:
    """Tests for default transaction descriptions."""

    def test_contribution(self):
        assert describe_transaction(
            TransactionType.CONTRIBUTION, AccountType.RRSP, Decimal("1000")
        ) == "RRSP contribution of $1,000.00"

    def test_withdrawal(self):
        assert describe_transaction(
            TransactionType.WITHDRAWAL, AccountType.TFSA, Decimal("250.5")
        ) == "TFSA withdrawal of $250.50"


class TestUsers:
    """Tests for user and limit flows."""

    def test_get_missing_user_raises(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.get_user(uuid4())

    def test_register_and_get(self, ledger, registered_user):
        fetched = ledger.get_user(registered_user.id)
        assert fetched.name == "Alex Tremblay"
        assert fetched.contribution_limits.rrsp.available_contribution_room == Decimal("21000")

    def test_update_limits_from_notice(self, ledger, registered_user):
        notice = NoticeOfAssessment(
            tax_year=2024,
            earned_income=Decimal("95000"),
            rrsp_tax_year_contribution_room=Decimal("18000"),
            rrsp_unused_contributions=Decimal("2000"),
            rrsp_pension_adjustment=Decimal("4500"),
            tfsa_contribution_room=Decimal("40000"),
            tfsa_withdrawal_room=Decimal("3000"),
        )
        user = ledger.update_contribution_limits(registered_user.id, notice)
        limits = ledger.get_user(user.id).contribution_limits

        assert limits.rrsp.available_contribution_room == Decimal("15500")
        assert limits.tfsa.cumulative_room == Decimal("40000")
        assert limits.tfsa.withdrawal_room == Decimal("3000")
        assert limits.tfsa.max_annual == Decimal("7000")
        assert limits.fhsa.available_room == Decimal("8000")
        assert limits.tax_year == 2024
        assert limits.earned_income == Decimal("95000")

    def test_notice_fhsa_room_respects_lifetime(self, ledger, registered_user):
        notice = NoticeOfAssessment(
            tax_year=2024,
            fhsa_contribution_room=Decimal("16000"),
            fhsa_lifetime_limit=Decimal("40000"),
            fhsa_total_contributed=Decimal("30000"),
        )
        ledger.update_contribution_limits(registered_user.id, notice)
        fhsa = ledger.get_user(registered_user.id).contribution_limits.fhsa
        assert fhsa.available_room == Decimal("10000")


class TestSpouse:
    """Tests for adding and removing a spouse."""

    def test_add_spouse_links_couple(self, ledger, registered_user):
        spouse = ledger.add_spouse(registered_user.id, name="Jamie Tremblay")
        primary = ledger.get_user(registered_user.id)

        assert spouse.is_primary is False
        assert spouse.email == registered_user.email
        assert spouse.province == "Ontario"
        assert spouse.couple_id == primary.couple_id
        assert primary.relationship_status == RelationshipStatus.MARRIED
        assert ledger.get_spouse(primary.id).id == spouse.id
        assert ledger.get_spouse(spouse.id).id == primary.id

    def test_spouse_gets_default_limits(self, ledger, registered_user):
        spouse = ledger.add_spouse(registered_user.id, name="Jamie")
        limits = spouse.contribution_limits
        assert limits.rrsp.available_contribution_room == Decimal("31560")
        assert limits.tfsa.max_annual == Decimal("7000")
        assert limits.tfsa.cumulative_room == Decimal("95000")

    def test_second_spouse_rejected(self, ledger, registered_user):
        ledger.add_spouse(registered_user.id, name="Jamie")
        with pytest.raises(LedgerError, match="already has a spouse"):
            ledger.add_spouse(registered_user.id, name="Robin")

    def test_spouse_cannot_add_spouse(self, ledger, registered_user):
        spouse = ledger.add_spouse(registered_user.id, name="Jamie")
        with pytest.raises(LedgerError, match="Only the primary user"):
            ledger.add_spouse(spouse.id, name="Robin")

    def test_remove_spouse_cleans_up(self, ledger, registered_user):
        spouse = ledger.add_spouse(registered_user.id, name="Jamie")
        account = ledger.add_account(Account(
            user_id=spouse.id,
            type=AccountType.TFSA,
            institution_name="EQ Bank",
            contribution_room=Decimal("7000"),
        ))
        ledger.record_transaction(_transaction(account, "500"))

        assert ledger.remove_spouse(registered_user.id) is True

        primary = ledger.get_user(registered_user.id)
        assert primary.couple_id is None
        assert primary.relationship_status == RelationshipStatus.SINGLE
        assert ledger.get_spouse(registered_user.id) is None
        assert ledger.list_accounts(spouse.id) == []
        assert ledger.list_transactions(user_id=spouse.id) == []
        with pytest.raises(NotFoundError):
            ledger.get_user(spouse.id)

    def test_remove_spouse_without_one(self, ledger, registered_user):
        assert ledger.remove_spouse(registered_user.id) is False

    def test_spouse_cannot_remove_primary(self, ledger, registered_user, rrsp_account):
        """Test that the login holder survives a remove_spouse call from the spouse."""
        spouse = ledger.add_spouse(registered_user.id, name="Jamie")

        with pytest.raises(LedgerError, match="Only the primary user can remove"):
            ledger.remove_spouse(spouse.id)

        assert ledger.get_user(registered_user.id).is_primary is True
        assert ledger.get_spouse(registered_user.id).id == spouse.id
        assert ledger.get_account(rrsp_account.id).user_id == registered_user.id

    def test_remove_spouse_deletes_their_goals(self, ledger, registered_user):
        spouse = ledger.add_spouse(registered_user.id, name="Jamie")
        ledger.add_goal(Goal(
            user_id=spouse.id,
            title="Cottage",
            target_amount=Decimal("50000"),
            target_date=date(2032, 6, 1),
        ))
        kept = ledger.add_goal(Goal(
            user_id=registered_user.id,
            title="Retirement",
            target_amount=Decimal("500000"),
            target_date=date(2050, 1, 1),
        ))

        ledger.remove_spouse(registered_user.id)

        assert [g.id for g in ledger.list_goals()] == [kept.id]


class TestAccounts:
    """Tests for account flows."""

    def test_add_account_requires_owner(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.add_account(Account(
                user_id=uuid4(),
                type=AccountType.RRSP,
                institution_name="TD",
            ))

    def test_accounts_by_type(self, ledger, rrsp_account, tfsa_account):
        grouped = ledger.accounts_by_type(rrsp_account.user_id)
        assert set(grouped) == {AccountType.RRSP, AccountType.TFSA}
        assert grouped[AccountType.RRSP][0].id == rrsp_account.id

    def test_portfolio_summary(self, ledger, rrsp_account, tfsa_account):
        ledger.record_transaction(_transaction(rrsp_account, "2000"))
        summary = ledger.portfolio_summary(rrsp_account.user_id)

        assert summary.account_count == 2
        assert summary.total_balance == Decimal("19000")
        assert summary.total_contributions == Decimal("2000")
        assert summary.total_room == Decimal("17000")
        assert summary.remaining_room == Decimal("15000")
        assert summary.balances_by_type[AccountType.RRSP] == Decimal("7000")

    def test_empty_portfolio_summary(self, ledger):
        summary = ledger.portfolio_summary()
        assert summary.account_count == 0
        assert summary.total_balance == Decimal("0")

    def test_delete_account_removes_transactions(self, ledger, rrsp_account):
        ledger.record_transaction(_transaction(rrsp_account, "100"))
        assert ledger.delete_account(rrsp_account.id) is True
        assert ledger.list_transactions(account_id=rrsp_account.id) == []
        with pytest.raises(NotFoundError):
            ledger.get_account(rrsp_account.id)


class TestRecordTransaction:
    """Tests for recording transactions."""

    def test_contribution_updates_account(self, ledger, rrsp_account):
        stored, result = ledger.record_transaction(_transaction(rrsp_account, "2000"))
        account = ledger.get_account(rrsp_account.id)

        assert result.is_valid
        assert account.current_balance == Decimal("7000")
        assert account.year_to_date_contributions == Decimal("2000")
        assert stored.description == "RRSP contribution of $2,000.00"
        assert stored.category == "Manual Entry"

    def test_rrsp_contribution_updates_period_totals(self, ledger, rrsp_account):
        ledger.record_transaction(_transaction(rrsp_account, "2000", on=date(2024, 2, 15)))
        ledger.record_transaction(_transaction(rrsp_account, "1000", on=date(2024, 3, 15)))
        rrsp = ledger.get_user(rrsp_account.user_id).contribution_limits.rrsp

        assert rrsp.total_first_contribution_period == Decimal("2000")
        assert rrsp.total_second_contribution_period == Decimal("1000")
        assert rrsp.total_tax_year_contributions == Decimal("3000")
        # Derived room is independent of the running totals
        assert rrsp.available_contribution_room == Decimal("21000")

    def test_fhsa_contribution_counts_against_lifetime(self, ledger, registered_user):
        fhsa = ledger.add_account(Account(
            user_id=registered_user.id,
            type=AccountType.FHSA,
            institution_name="Questrade",
            contribution_room=Decimal("8000"),
        ))
        ledger.record_transaction(_transaction(fhsa, "3000"))
        limits = ledger.get_user(registered_user.id).contribution_limits
        assert limits.fhsa.total_contributed == Decimal("3000")

    def test_tfsa_contribution_counts_against_owner_room(self, ledger, tfsa_account):
        ledger.record_transaction(_transaction(tfsa_account, "5000"))
        tfsa = ledger.get_user(tfsa_account.user_id).contribution_limits.tfsa
        assert tfsa.total_contributed == Decimal("5000")
        assert tfsa.available_room == Decimal("45000")

    def test_withdrawal_reduces_balance_only(self, ledger, tfsa_account):
        ledger.record_transaction(_transaction(tfsa_account, "2000", kind=TransactionType.WITHDRAWAL))
        account = ledger.get_account(tfsa_account.id)
        assert account.current_balance == Decimal("10000")
        assert account.year_to_date_contributions == Decimal("0")

    def test_transfer_adds_to_balance(self, ledger, tfsa_account):
        ledger.record_transaction(_transaction(tfsa_account, "1500", kind=TransactionType.TRANSFER))
        account = ledger.get_account(tfsa_account.id)
        assert account.current_balance == Decimal("13500")
        assert account.year_to_date_contributions == Decimal("0")

    def test_custom_description_kept(self, ledger, tfsa_account):
        transaction = _transaction(tfsa_account, "100").model_copy(update={
            "description": "Payday top-up",
            "category": "Automatic",
        })
        stored, _ = ledger.record_transaction(transaction)
        assert stored.description == "Payday top-up"
        assert stored.category == "Automatic"

    def test_over_contribution_is_advisory_by_default(self, ledger, tfsa_account):
        stored, result = ledger.record_transaction(_transaction(tfsa_account, "9000"))
        assert result.has_errors
        assert ledger.list_transactions(account_id=tfsa_account.id)[0].id == stored.id
        assert ledger.get_account(tfsa_account.id).year_to_date_contributions == Decimal("9000")

    def test_over_contribution_blocked_when_configured(self, monkeypatch, store, primary_user):
        monkeypatch.setenv("BLOCK_OVER_CONTRIBUTION", "true")
        ledger = HouseholdLedger(store=store, settings=Settings())
        user = ledger.register_user(primary_user)
        account = ledger.add_account(Account(
            user_id=user.id,
            type=AccountType.TFSA,
            institution_name="TD",
            contribution_room=Decimal("1000"),
        ))

        with pytest.raises(TransactionRejectedError) as exc_info:
            ledger.record_transaction(_transaction(account, "1500"))

        assert "$500.00" in str(exc_info.value)
        assert exc_info.value.result.error_count == 1
        assert ledger.list_transactions(account_id=account.id) == []
        assert ledger.get_account(account.id).current_balance == Decimal("0")

    def test_owner_mismatch_always_rejected(self, ledger, rrsp_account):
        transaction = _transaction(rrsp_account, "100").model_copy(update={"user_id": uuid4()})
        with pytest.raises(TransactionRejectedError):
            ledger.record_transaction(transaction)
        assert ledger.list_transactions() == []

    def test_unknown_account_raises(self, ledger, registered_user):
        transaction = Transaction(
            user_id=registered_user.id,
            account_id=uuid4(),
            type=TransactionType.CONTRIBUTION,
            amount=Decimal("100"),
            date=date(2024, 1, 5),
        )
        with pytest.raises(NotFoundError):
            ledger.record_transaction(transaction)

    def test_list_transactions_most_recent_first(self, ledger, tfsa_account):
        ledger.record_transaction(_transaction(tfsa_account, "100", on=date(2024, 1, 1)))
        ledger.record_transaction(_transaction(tfsa_account, "200", on=date(2024, 5, 1)))
        dates = [t.date for t in ledger.list_transactions(user_id=tfsa_account.user_id)]
        assert dates == [date(2024, 5, 1), date(2024, 1, 1)]


class TestGoalsAndPlanning:
    """Tests for goals and allocation suggestions."""

    def test_add_and_list_goals(self, ledger, registered_user):
        goal = ledger.add_goal(Goal(
            user_id=registered_user.id,
            title="First home",
            target_amount=Decimal("40000"),
            target_date=date(2029, 1, 1),
            account_types=[AccountType.FHSA],
        ))
        assert [g.id for g in ledger.list_goals(registered_user.id)] == [goal.id]

    def test_goal_for_unknown_user_rejected(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.add_goal(Goal(
                user_id=uuid4(),
                title="Nope",
                target_amount=Decimal("1"),
                target_date=date(2030, 1, 1),
            ))

    def test_suggest_allocation_high_bracket(self, ledger, registered_user):
        notice = NoticeOfAssessment(
            tax_year=2024,
            rrsp_tax_year_contribution_room=Decimal("10000"),
            tfsa_contribution_room=Decimal("7000"),
        )
        ledger.update_contribution_limits(registered_user.id, notice)

        # Ontario at 120k sits in the 31.48% bracket
        result = ledger.suggest_allocation(registered_user.id, Decimal("20000"), Decimal("120000"))
        assert (result.fhsa, result.rrsp, result.tfsa) == (8000, 10000, 2000)
        assert result.strategy.startswith("FHSA for home purchase benefits. RRSP for tax deduction.")

    def test_suggest_allocation_uses_remaining_rrsp_room(self, ledger, rrsp_account):
        ledger.record_transaction(_transaction(rrsp_account, "5000"))
        # 21,000 available less 5,000 contributed; low bracket funds TFSA first
        result = ledger.suggest_allocation(rrsp_account.user_id, Decimal("80000"), Decimal("40000"))
        assert result.fhsa == 8000
        assert result.tfsa == 50000
        assert result.rrsp == 16000


    def test_suggest_allocation_uses_remaining_tfsa_room(self, ledger, tfsa_account):
        before = ledger.suggest_allocation(tfsa_account.user_id, Decimal("100000"), Decimal("40000"))
        ledger.record_transaction(_transaction(tfsa_account, "5000"))
        after = ledger.suggest_allocation(tfsa_account.user_id, Decimal("100000"), Decimal("40000"))

        assert before.tfsa == 50000
        assert after.tfsa == 45000


@pytest.fixture
def blocking_ledger(monkeypatch, store) -> HouseholdLedger:
    monkeypatch.setenv("BLOCK_OVER_CONTRIBUTION", "true")
    return HouseholdLedger(store=store, settings=Settings())


@pytest.fixture
def small_tfsa(blocking_ledger, primary_user) -> Account:
    user = blocking_ledger.register_user(primary_user)
    return blocking_ledger.add_account(Account(
        user_id=user.id,
        type=AccountType.TFSA,
        institution_name="Tangerine",
        contribution_room=Decimal("1000"),
    ))


class TestCorrections:
    """Tests for updating and deleting recorded data."""

    def test_update_account(self, ledger, rrsp_account):
        corrected = rrsp_account.model_copy(update={"current_balance": Decimal("5250.75")})
        ledger.update_account(corrected)
        assert ledger.get_account(rrsp_account.id).current_balance == Decimal("5250.75")

    def test_update_missing_account_raises(self, ledger, registered_user):
        with pytest.raises(NotFoundError):
            ledger.update_account(Account(
                user_id=registered_user.id,
                type=AccountType.TFSA,
                institution_name="TD",
            ))

    def test_delete_transaction_reverses_contribution(self, ledger, rrsp_account):
        stored, _ = ledger.record_transaction(_transaction(rrsp_account, "2000"))

        assert ledger.delete_transaction(stored.id) is True

        account = ledger.get_account(rrsp_account.id)
        rrsp = ledger.get_user(rrsp_account.user_id).contribution_limits.rrsp
        assert account.current_balance == Decimal("5000")
        assert account.year_to_date_contributions == Decimal("0")
        assert rrsp.total_first_contribution_period == Decimal("0")
        assert rrsp.total_tax_year_contributions == Decimal("0")
        assert ledger.list_transactions() == []

    def test_delete_withdrawal_restores_balance(self, ledger, tfsa_account):
        stored, _ = ledger.record_transaction(
            _transaction(tfsa_account, "2000", kind=TransactionType.WITHDRAWAL)
        )
        ledger.delete_transaction(stored.id)
        assert ledger.get_account(tfsa_account.id).current_balance == Decimal("12000")

    def test_delete_missing_transaction(self, ledger):
        assert ledger.delete_transaction(uuid4()) is False

    def test_update_transaction_moves_totals(self, ledger, rrsp_account):
        """Test that a corrected amount and date replace the original figures."""
        stored, _ = ledger.record_transaction(_transaction(rrsp_account, "2000", on=date(2024, 2, 15)))
        corrected = stored.model_copy(update={
            "amount": Decimal("3000"),
            "date": date(2024, 3, 15),
        })

        updated, result = ledger.update_transaction(corrected)

        account = ledger.get_account(rrsp_account.id)
        rrsp = ledger.get_user(rrsp_account.user_id).contribution_limits.rrsp
        assert result.is_valid
        assert account.current_balance == Decimal("8000")
        assert account.year_to_date_contributions == Decimal("3000")
        assert rrsp.total_first_contribution_period == Decimal("0")
        assert rrsp.total_second_contribution_period == Decimal("3000")
        assert rrsp.total_tax_year_contributions == Decimal("3000")
        assert updated.created_at == stored.created_at
        assert [t.amount for t in ledger.list_transactions()] == [Decimal("3000")]

    def test_update_missing_transaction_raises(self, ledger, rrsp_account):
        with pytest.raises(NotFoundError):
            ledger.update_transaction(_transaction(rrsp_account, "100"))

    def test_update_checked_without_previous_amount(self, blocking_ledger, small_tfsa):
        """Test that the room being replaced is available to the correction."""
        stored, _ = blocking_ledger.record_transaction(_transaction(small_tfsa, "800"))
        updated, _ = blocking_ledger.update_transaction(
            stored.model_copy(update={"amount": Decimal("1000")})
        )
        assert updated.amount == Decimal("1000")
        assert blocking_ledger.get_account(small_tfsa.id).year_to_date_contributions == Decimal("1000")

    def test_rejected_update_leaves_transaction_untouched(self, blocking_ledger, small_tfsa):
        stored, _ = blocking_ledger.record_transaction(_transaction(small_tfsa, "800"))

        with pytest.raises(TransactionRejectedError):
            blocking_ledger.update_transaction(stored.model_copy(update={"amount": Decimal("1500")}))

        account = blocking_ledger.get_account(small_tfsa.id)
        tfsa = blocking_ledger.get_user(small_tfsa.user_id).contribution_limits.tfsa
        assert account.current_balance == Decimal("800")
        assert account.year_to_date_contributions == Decimal("800")
        assert tfsa.total_contributed == Decimal("800")
        assert blocking_ledger.list_transactions()[0].amount == Decimal("800")

    def test_update_goal_progress(self, ledger, registered_user):
        goal = ledger.add_goal(Goal(
            user_id=registered_user.id,
            title="First home",
            target_amount=Decimal("40000"),
            target_date=date(2029, 1, 1),
        ))
        updated = ledger.update_goal(goal.model_copy(update={"current_amount": Decimal("10000")}))

        assert updated.progress_percent == 25.0
        assert ledger.list_goals(registered_user.id)[0].current_amount == Decimal("10000")

    def test_update_missing_goal_raises(self, ledger, registered_user):
        with pytest.raises(NotFoundError):
            ledger.update_goal(Goal(
                user_id=registered_user.id,
                title="Ghost",
                target_amount=Decimal("1"),
                target_date=date(2030, 1, 1),
            ))

    def test_delete_goal(self, ledger, registered_user):
        goal = ledger.add_goal(Goal(
            user_id=registered_user.id,
            title="Emergency fund",
            target_amount=Decimal("10000"),
            target_date=date(2027, 1, 1),
        ))
        assert ledger.delete_goal(goal.id) is True
        assert ledger.delete_goal(goal.id) is False
        assert ledger.list_goals(registered_user.id) == []


class TestCreateLedger:
    """Tests for the factory."""

    def test_defaults_to_in_memory_store(self):
        ledger = create_ledger(settings=Settings())
        assert isinstance(ledger, HouseholdLedger)
        assert ledger.list_accounts() == []

    def test_uses_given_store(self, primary_user):
        store = InMemoryHouseholdStore()
        ledger = create_ledger(store=store, settings=Settings())
        ledger.register_user(primary_user)
        assert store.get_user(str(primary_user.id)) is not None
