from ...core.errors import ValidationError
from ...core.forms import text_field
from ...core.query_cache import make_key

KIND = 'categories'


def category_payload(data, partial=False):
    """Validate the category form: name and description are required."""
    if not isinstance(data, dict):
        raise ValidationError('Category data must be an object')
    payload = {}
    for field in ('name', 'description'):
        if field in data or not partial:
            value = text_field(data, field)
            if not value:
                raise ValidationError(f'{field.capitalize()} is required')
            payload[field] = value

    if 'active' in data:
        active = data['active']
        if isinstance(active, str):
            active = active.lower() in ('1', 'true', 'on', 'yes')
        payload['active'] = bool(active)
    elif not partial:
        payload['active'] = True
    return payload


class CategoryService:
    def __init__(self, api, cache):
        self.api = api
        self.cache = cache

    def list_categories(self, search=None):
        """Returns {'categories': [...], 'total': n}; empty on fetch failure."""
        def fetch():
            categories = self.api.get_categories()
            if search:
                needle = search.lower()
                categories = [
                    c for c in categories
                    if needle in c.name.lower() or needle in c.description.lower()
                ]
            return {'categories': categories, 'total': len(categories)}

        return self.cache.query(make_key(KIND, search=search or None), fetch,
                                default={'categories': [], 'total': 0})

    def active_categories(self):
        return self.cache.query(make_key(KIND, active=True), self.api.get_active_categories,
                                default=[])

    def get_category(self, category_id):
        return self.cache.query(make_key(KIND, id=str(category_id)),
                                lambda: self.api.get_category(category_id))

    def create_category(self, data):
        payload = category_payload(data)
        return self.cache.mutate(KIND, lambda: self.api.create_category(payload),
                                 also=('admin-stats',))

    def update_category(self, category_id, data):
        payload = category_payload(data, partial=True)
        return self.cache.mutate(KIND, lambda: self.api.update_category(category_id, payload),
                                 also=('admin-stats',))

    def delete_category(self, category_id):
        return self.cache.mutate(KIND, lambda: self.api.delete_category(category_id),
                                 also=('admin-stats',))
