import pytest
from grocery.identity.customer import Customer
from grocery.loyalty.ledger import points_for_amount, rupees_for_points
from protean.exceptions import ValidationError


@pytest.mark.parametrize(
    "amount,points",
    [(230.0, 23), (9.99, 0), (10.0, 1), (0.0, 0), (-50.0, 0), (1234.5, 123)],
)
def test_points_earned_per_ten_rupees(amount, points):
    assert points_for_amount(amount) == points


def test_ten_points_redeem_for_one_rupee():
    assert rupees_for_points(50) == 5.0
    assert rupees_for_points(0) == 0.0


def test_balance_cannot_go_negative():
    customer = Customer.register(name="Asha Verma", phone="9876500001")
    customer.adjust_loyalty_points(20)
    with pytest.raises(ValidationError):
        customer.adjust_loyalty_points(-21)
    assert customer.loyalty_points == 20
