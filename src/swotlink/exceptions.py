"""
Excepciones del dominio.

Solo se propagan los errores que el caller tiene que manejar: perfiles
inexistentes y nombres de colección inválidos. Los errores de disco se
reportan como valores de retorno desde el store.
"""


class SwotLinkError(Exception):
    """Error base del paquete."""


class NotFoundError(SwotLinkError):
    """Un registro requerido no existe."""


class ProfileNotFoundError(NotFoundError):
    """El perfil (propio o consultado) no existe o su usuario no está activo."""

    def __init__(self, role: str, user_id=None, profile_id=None):
        self.role = role
        self.user_id = user_id
        self.profile_id = profile_id
        if profile_id is not None:
            detail = f"profile_id={profile_id}"
        else:
            detail = f"user_id={user_id}"
        super().__init__(f"Perfil {role} no encontrado ({detail})")


class UnknownCollectionError(SwotLinkError, KeyError):
    """La colección no está registrada en el store."""

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(collection)

    def __str__(self) -> str:
        return f"Colección desconocida: {self.collection!r}"
