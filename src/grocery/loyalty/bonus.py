"""Admin-granted bonus points."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from grocery.domain import grocery
from grocery.identity.customer import Customer
from grocery.loyalty.entry import LoyaltyEntry
from grocery.loyalty.ledger import bonus_points


@grocery.command(part_of="LoyaltyEntry")
class GrantBonusPoints:
    customer_id = Identifier(required=True)
    points = Integer(required=True, min_value=1)
    description = String(max_length=255)


@grocery.command_handler(part_of=LoyaltyEntry)
class BonusPointsHandler:
    @handle(GrantBonusPoints)
    def grant_bonus(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        entry = bonus_points(customer, command.points, command.description)
        repo.add(customer)
        return str(entry.id)
