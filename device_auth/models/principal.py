"""
Authenticated caller identities.

A caller is either a plain client credential or a combined client+user
credential that carries its own client id. Both expose
``effective_client_id``, the id a device authorization request must match.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ClientPrincipal(BaseModel):
    """Client authenticated with its own credentials"""

    kind: Literal["client"] = "client"
    name: str
    authenticated: bool = True

    @property
    def effective_client_id(self) -> str:
        return self.name


class ClientUserPrincipal(BaseModel):
    """User authenticated through a client, e.g. via a bearer token"""

    kind: Literal["client_user"] = "client_user"
    name: str
    client_id: str
    authenticated: bool = True

    @property
    def effective_client_id(self) -> str:
        return self.client_id


Principal = Annotated[ClientPrincipal | ClientUserPrincipal, Field(discriminator="kind")]
