"""
Accounts exceptions.
"""


class RoleDoesNotExist(LookupError):
    """Raised when a role (group) name or id cannot be resolved."""

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f'There is no role named or identified by {identifier!r}.')


class PermissionDoesNotExist(LookupError):
    """Raised when a permission codename cannot be resolved."""

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f'There is no permission named {identifier!r}.')
