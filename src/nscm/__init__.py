from nscm.authorize import Connection, build_authorization_url
from nscm.config import SessionSettings, SettingsStore, get_config
from nscm.exceptions import NscmError
from nscm.models import AuthResult, Team
from nscm.pkce import PkceSecret, generate_pkce
from nscm.signin import SessionResult, SigninFlow, SigninOptions, signin

__all__ = [
    "AuthResult",
    "Connection",
    "NscmError",
    "PkceSecret",
    "SessionResult",
    "SessionSettings",
    "SettingsStore",
    "SigninFlow",
    "SigninOptions",
    "Team",
    "build_authorization_url",
    "generate_pkce",
    "get_config",
    "signin",
]
