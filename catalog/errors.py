class CatalogError(Exception):
    pass

class ObjectNotFoundError(CatalogError):
    def __init__(self, name: str, context: str):
        super().__init__(f"{context} '{name}' not found.")

class DependentObjectsError(CatalogError):
    def __init__(self, kind: str, name: str):
        super().__init__(
            f"cannot drop {kind} '{name}' because other objects depend on it"
        )
