"""Unit tests for allocation service."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from src.services.allocation_service import (
    AllocationMode,
    AllocationService,
    SplitDraft,
    to_money,
)
from src.services.errors import ValidationError


class TestAllocateEqual:
    """Test equal allocation and its rounding policy."""

    @pytest.fixture
    def service(self):
        """Create allocation service instance."""
        return AllocationService()

    def test_even_division(self, service):
        """1800 among three members is 600 each."""
        result = service.allocate_equal(Decimal("1800"), [1, 2, 3])

        assert result == {1: Decimal("600.00"), 2: Decimal("600.00"), 3: Decimal("600.00")}

    def test_two_members_exact(self, service):
        """156.88 among two members is 78.44 each."""
        result = service.allocate_equal(Decimal("156.88"), [1, 2])

        assert result[1] == Decimal("78.44")
        assert result[2] == Decimal("78.44")
        assert sum(result.values()) == Decimal("156.88")

    def test_residual_goes_to_first_participant_by_default(self, service):
        """100 among three: one share carries the extra cent."""
        result = service.allocate_equal(Decimal("100.00"), [1, 2, 3])

        assert result[1] == Decimal("33.34")
        assert result[2] == Decimal("33.33")
        assert result[3] == Decimal("33.33")
        assert sum(result.values()) == Decimal("100.00")

    def test_residual_goes_to_settling_participant(self, service):
        """The named settling participant absorbs the residual."""
        result = service.allocate_equal(Decimal("124.87"), [1, 2, 3], settling_id=3)

        assert result[1] == Decimal("41.62")
        assert result[2] == Decimal("41.62")
        assert result[3] == Decimal("41.63")

    def test_settling_id_not_participant_falls_back_to_first(self, service):
        """A settling id outside the participant set is ignored."""
        result = service.allocate_equal(Decimal("10.00"), [4, 5, 6], settling_id=99)

        assert result[4] == Decimal("3.34")
        assert 99 not in result

    def test_result_preserves_participant_order(self, service):
        """Result keys follow participant order even when settling is not first."""
        result = service.allocate_equal(Decimal("10.00"), [7, 3, 5], settling_id=5)

        assert list(result.keys()) == [7, 3, 5]

    def test_single_participant_owes_everything(self, service):
        """One participant owes the full amount."""
        assert service.allocate_equal(Decimal("79.99"), [42]) == {42: Decimal("79.99")}

    @pytest.mark.parametrize(
        "amount,count",
        [
            ("0.01", 3),
            ("0.05", 10),
            ("1.00", 7),
            ("99.99", 6),
            ("1234.57", 9),
            ("1000000.01", 13),
        ],
    )
    def test_sum_is_exact_and_shares_never_negative(self, service, amount, count):
        """Shares sum to the amount exactly; the residual is at most (count-1) cents."""
        participants = list(range(1, count + 1))
        result = service.allocate_equal(Decimal(amount), participants)

        assert sum(result.values()) == Decimal(amount)
        assert all(share >= 0 for share in result.values())
        base = result[participants[1]] if count > 1 else result[1]
        assert result[1] - base <= Decimal("0.01") * (count - 1)

    def test_float_amount_accepted(self, service):
        """Float input is converted through its string form."""
        result = service.allocate_equal(156.88, [1, 2])

        assert sum(result.values()) == Decimal("156.88")

    def test_empty_participants_rejected(self, service):
        """Empty participant list fails validation."""
        with pytest.raises(ValidationError, match="participant list is empty"):
            service.allocate_equal(Decimal("10.00"), [])

    def test_duplicate_participants_rejected(self, service):
        """Duplicate ids fail validation."""
        with pytest.raises(ValidationError, match="unique"):
            service.allocate_equal(Decimal("10.00"), [1, 2, 1])

    @pytest.mark.parametrize("amount", ["0", "-5.00"])
    def test_non_positive_amount_rejected(self, service, amount):
        """Zero and negative amounts fail validation."""
        with pytest.raises(ValidationError, match="amount must be positive"):
            service.allocate_equal(Decimal(amount), [1, 2])

    def test_sub_cent_amount_rejected(self, service):
        """Amounts with more than two decimals fail validation."""
        with pytest.raises(ValidationError, match="2 decimal places"):
            service.allocate_equal(Decimal("10.005"), [1, 2])


class TestAllocateCustom:
    """Test custom allocation validation."""

    @pytest.fixture
    def service(self):
        """Create allocation service instance."""
        return AllocationService()

    def test_matching_total_accepted(self, service):
        """40 + 60 covers 100."""
        result = service.allocate_custom(Decimal("100.00"), {1: 40, 2: 60})

        assert result == {1: Decimal("40.00"), 2: Decimal("60.00")}

    def test_mismatch_rejected(self, service):
        """40 + 50 does not cover 100."""
        with pytest.raises(ValidationError, match="split total mismatch") as exc_info:
            service.allocate_custom(Decimal("100.00"), {1: 40, 2: 50})

        assert exc_info.value.code == "validation_error"

    def test_within_tolerance_accepted_without_correction(self, service):
        """A one-cent difference passes and values are kept as given."""
        result = service.allocate_custom(Decimal("100.00"), {1: "33.33", 2: "33.33", 3: "33.33"})

        assert sum(result.values()) == Decimal("99.99")

    def test_just_outside_tolerance_rejected(self, service):
        """A two-cent difference fails."""
        with pytest.raises(ValidationError, match="split total mismatch"):
            service.allocate_custom(Decimal("100.00"), {1: "50.00", 2: "49.98"})

    def test_custom_tolerance(self):
        """A wider tolerance accepts a larger difference."""
        service = AllocationService(tolerance=Decimal("0.05"))

        result = service.allocate_custom(Decimal("100.00"), {1: "50.00", 2: "49.96"})

        assert result[2] == Decimal("49.96")

    def test_zero_share_allowed(self, service):
        """A participant may owe nothing."""
        result = service.allocate_custom(Decimal("30.00"), {1: 30, 2: 0})

        assert result[2] == Decimal("0.00")

    def test_negative_share_rejected(self, service):
        """Negative shares fail validation."""
        with pytest.raises(ValidationError, match="must not be negative"):
            service.allocate_custom(Decimal("30.00"), {1: 40, 2: -10})

    def test_missing_participant_amount_rejected(self, service):
        """Every participant needs an explicit amount."""
        with pytest.raises(ValidationError, match="missing"):
            service.allocate_custom(Decimal("100.00"), {1: 100}, participant_ids=[1, 2])

    def test_non_participant_amount_rejected(self, service):
        """Amounts for members outside the split set are rejected."""
        with pytest.raises(ValidationError, match="non-participant"):
            service.allocate_custom(Decimal("100.00"), {1: 50, 2: 25, 3: 25}, participant_ids=[1, 2])

    def test_result_follows_participant_order(self, service):
        """Given participant ids order the result."""
        result = service.allocate_custom(Decimal("100.00"), {2: 60, 1: 40}, participant_ids=[1, 2])

        assert list(result.keys()) == [1, 2]

    def test_empty_amounts_rejected(self, service):
        """No participants at all fails validation."""
        with pytest.raises(ValidationError, match="participant list is empty"):
            service.allocate_custom(Decimal("100.00"), {})


class TestAllocateDispatch:
    """Test mode dispatch and split drafts."""

    @pytest.fixture
    def service(self):
        """Create allocation service instance."""
        return AllocationService()

    def test_equal_mode_by_string(self, service):
        """String mode values are accepted."""
        result = service.allocate(Decimal("90.00"), "equal", [1, 2, 3])

        assert all(share == Decimal("30.00") for share in result.values())

    def test_custom_mode_requires_amounts(self, service):
        """Custom mode without amounts fails."""
        with pytest.raises(ValidationError, match="custom amounts required"):
            service.allocate(Decimal("90.00"), AllocationMode.CUSTOM, [1, 2])

    def test_equal_mode_rejects_custom_amounts(self, service):
        """Custom amounts are not silently dropped in equal mode."""
        with pytest.raises(ValidationError, match="only accepted for custom allocation"):
            service.allocate(Decimal("90.00"), "equal", [1, 2], custom_amounts={1: Decimal("90.00"), 2: Decimal("0")})

    def test_unknown_mode_rejected(self, service):
        """Unknown modes fail validation."""
        with pytest.raises(ValidationError, match="unknown allocation mode"):
            service.allocate(Decimal("90.00"), "weighted", [1, 2])

    def test_creator_split_marked_paid(self, service):
        """Only the creator's own split starts paid."""
        due = datetime(2025, 5, 31, tzinfo=timezone.utc)
        allocations = service.allocate(Decimal("1800"), "equal", [1, 2, 3], settling_id=1)

        drafts = service.build_split_drafts(allocations, created_by_id=1, due_date=due)

        assert drafts == [
            SplitDraft(user_id=1, amount=Decimal("600.00"), is_paid=True, due_date=due),
            SplitDraft(user_id=2, amount=Decimal("600.00"), is_paid=False, due_date=due),
            SplitDraft(user_id=3, amount=Decimal("600.00"), is_paid=False, due_date=due),
        ]

    def test_creator_not_participating_has_no_paid_split(self, service):
        """If the creator is not a participant every split starts unpaid."""
        allocations = service.allocate(Decimal("20.00"), "equal", [2, 3], settling_id=1)

        drafts = service.build_split_drafts(allocations, created_by_id=1)

        assert not any(draft.is_paid for draft in drafts)


class TestToMoney:
    """Test money conversion helper."""

    def test_quantizes_integers(self):
        assert to_money(5) == Decimal("5.00")

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError, match="must be a number"):
            to_money("abc")

    def test_rejects_infinity(self):
        with pytest.raises(ValidationError, match="must be a number"):
            to_money(Decimal("Infinity"))
