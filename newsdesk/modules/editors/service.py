from ...core.errors import ValidationError
from ...core.models import EDITOR_ROLES
from ...core.query_cache import make_key
from ..auth.utils import validate_password_strength

KIND = 'editors'


class EditorService:
    def __init__(self, api, cache):
        self.api = api
        self.cache = cache

    def list_editors(self):
        return self.cache.query(make_key(KIND), self.api.get_editors, default=[])

    def register_editor(self, name, email, password, role='editor'):
        if not all([name, email, password]):
            raise ValidationError('All fields are required')
        if role not in EDITOR_ROLES:
            raise ValidationError(f'Role must be one of: {", ".join(EDITOR_ROLES)}')
        if not validate_password_strength(password):
            raise ValidationError('Password does not meet requirements')
        return self.cache.mutate(
            KIND, lambda: self.api.register_editor(name, email, password, role))
