from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
    "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.9"
)
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 ferryhttp/0.1"
)


class Settings(BaseSettings):
    """Built-in request defaults, overridable from the environment."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Milliseconds until response headers must arrive, per hop
    timeout: float = Field(10_000, validation_alias="FERRYHTTP_TIMEOUT")
    max_redirects: int = Field(10, validation_alias="FERRYHTTP_MAX_REDIRECTS")
    use_fetch: bool = Field(False, validation_alias="FERRYHTTP_USE_FETCH")

    accept: str = Field(DEFAULT_ACCEPT, validation_alias="FERRYHTTP_ACCEPT")
    accept_language: str = Field("*", validation_alias="FERRYHTTP_ACCEPT_LANGUAGE")
    accept_encoding: str = Field("gzip, deflate, br", validation_alias="FERRYHTTP_ACCEPT_ENCODING")
    user_agent: str = Field(DEFAULT_USER_AGENT, validation_alias="FERRYHTTP_USER_AGENT")
