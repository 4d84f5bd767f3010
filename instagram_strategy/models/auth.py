from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

DisplayMode = Literal["page", "async", "iframe", "popup", "touch", "wap"]

class StrategyOptions(BaseModel):
    '''
    Process-wide strategy configuration, built once at startup.
    Frozen so a request can never change what the next one sees.
    '''
    model_config = ConfigDict(frozen=True)

    # Per-strategy client credentials; only used when both are set
    client_id: Optional[str] = None
    client_secret: Optional[str] = None

    default_scope: Optional[str] = "user_profile"
    profile_fields: str = "user_id"
    uid_field: str = "id"
    display: Optional[DisplayMode] = None
    auth_type: Optional[str] = None
    allowed_request_params: Tuple[str, ...] = ("auth_type", "scope", "locale", "display")
    # Overrides the callback URL computed by the host
    callback_url: Optional[str] = None

class AuthError(BaseModel):
    message_key: Optional[str] = Field(None, description="Error kind, e.g. missing_code or the provider's error code")
    message: Optional[str] = None

class Credentials(BaseModel):
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    expires: bool = False
    expires_at: Optional[int] = None
    scopes: List[str] = Field(default_factory=list)

class Info(BaseModel):
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    nickname: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    urls: Dict[str, Optional[str]] = Field(default_factory=dict)

class Extra(BaseModel):
    # Provider data exactly as received: {"token": Token, "user": dict}
    raw_info: Dict[str, Any] = Field(default_factory=dict)

class Auth(BaseModel):
    '''Normalized result of a successful callback, handed to the host application.'''
    provider: str
    strategy: str
    uid: Union[str, int, None] = None
    credentials: Credentials
    info: Info
    extra: Extra

class Failure(BaseModel):
    provider: str
    strategy: str
    errors: List[AuthError] = Field(default_factory=list)
