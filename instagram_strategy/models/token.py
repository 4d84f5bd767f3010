from pydantic import BaseModel, Field
from typing import Any, Dict, Mapping, Optional

# Fields promoted to attributes; everything else the provider sends lands in other_params
TOKEN_FIELDS = ("access_token", "refresh_token", "token_type", "expires_at")

class Token(BaseModel):
    '''OAuth2 access token as granted by the provider.'''
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_at: Optional[int] = Field(None, description="Unix timestamp, None if the token does not expire")
    other_params: Dict[str, Any] = Field(default_factory=dict, description="Provider-specific fields (scope, user_id, error, ...)")

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> "Token":
        other_params = {k: v for k, v in data.items() if k not in TOKEN_FIELDS}
        return cls(
            access_token=data.get("access_token"),
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type"),
            expires_at=data.get("expires_at"),
            other_params=other_params,
        )

class TokenExchange(BaseModel):
    '''
    Outcome of trading an authorization code for a token.
    Exactly one of `token` and `error` is set.
    '''
    token: Optional[Token] = None
    error: Optional[str] = Field(None, description="Why the token endpoint rejected the exchange")

    @property
    def ok(self) -> bool:
        return self.error is None
