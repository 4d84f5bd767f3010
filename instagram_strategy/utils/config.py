from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field
from pathlib import Path
from dotenv import load_dotenv

# .env lives in the project root, two levels up from instagram_strategy/utils/
env_path = Path(__file__).parent.parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

class Settings(BaseSettings):
    # Instagram OAuth2 client
    instagram_client_id: Optional[str] = Field(None, alias='INSTAGRAM_CLIENT_ID')
    instagram_client_secret: Optional[str] = Field(None, alias='INSTAGRAM_CLIENT_SECRET')
    # Overrides the callback URL computed from the incoming request
    instagram_redirect_uri: Optional[str] = Field(None, alias='INSTAGRAM_REDIRECT_URI')

    # Strategy defaults
    instagram_default_scope: str = Field("user_profile", alias='INSTAGRAM_DEFAULT_SCOPE')
    instagram_uid_field: str = Field("id", alias='INSTAGRAM_UID_FIELD')
    instagram_profile_fields: str = Field("user_id", alias='INSTAGRAM_PROFILE_FIELDS')
    instagram_display: Optional[str] = Field(None, alias='INSTAGRAM_DISPLAY')
    instagram_auth_type: Optional[str] = Field(None, alias='INSTAGRAM_AUTH_TYPE')
    instagram_allowed_request_params: List[str] = Field(
        ["auth_type", "scope", "locale", "display"],
        alias='INSTAGRAM_ALLOWED_REQUEST_PARAMS',
    )

    # Signs the session cookie that carries the OAuth state between phases
    app_secret_key: str = Field(..., alias='APP_SECRET_KEY')

    class Config:
        # Aliases let us use the .env names directly.
        env_file = str(env_path)
        env_file_encoding = 'utf-8'
        case_sensitive = True
        extra = 'ignore'

# Create a single instance to be imported elsewhere
settings = Settings()
