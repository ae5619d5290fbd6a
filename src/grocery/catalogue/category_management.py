"""Admin category management."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from grocery.catalogue.category import Category
from grocery.domain import grocery


@grocery.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=100, sanitize=False)
    description: Text()
    image: String(max_length=500)
    parent_id: Identifier()
    sort_order: Integer(default=0)


@grocery.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(max_length=100, sanitize=False)
    description: Text()
    image: String(max_length=500)
    sort_order: Integer()
    is_active: Boolean()


@grocery.command(part_of="Category")
class DeactivateCategory:
    category_id: Identifier(required=True)


@grocery.command_handler(part_of=Category)
class CategoryManagementHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)

        if command.parent_id is not None:
            try:
                parent = repo.get(command.parent_id)
            except ObjectNotFoundError:
                raise ValidationError({"parent_id": ["Parent category not found"]}) from None
            if not parent.is_top_level:
                raise ValidationError({"parent_id": ["Subcategories cannot have children"]})

        category = Category.create(
            name=command.name,
            description=command.description,
            image=command.image,
            parent_id=command.parent_id,
            sort_order=command.sort_order,
        )
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.update_details(
            name=command.name,
            description=command.description,
            image=command.image,
            sort_order=command.sort_order,
            is_active=command.is_active,
        )
        repo.add(category)

    @handle(DeactivateCategory)
    def deactivate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.deactivate()
        repo.add(category)
