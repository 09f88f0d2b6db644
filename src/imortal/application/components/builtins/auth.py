"""Authentication components: login, register, logout, session."""

from __future__ import annotations

from imortal.application.components.definition import (
    BuiltinComponent,
    ComponentDefinition,
    ConfigType,
    data_in,
    data_out,
    field_def,
    option,
    trigger_in,
    trigger_out,
)
from imortal.domain.entities import Validation
from imortal.domain.enums import ComponentCategory, ValidationKind
from imortal.domain.types import ANY, BOOL, JSON, STRING, entity

_EMAIL = (Validation(kind=ValidationKind.EMAIL),)


def login() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.AUTH_LOGIN.value,
        name="Login",
        category=ComponentCategory.AUTH,
        description="User login with email and password",
        icon="log-in",
        fields=(
            field_def("email", STRING, required=True, validations=_EMAIL),
            field_def(
                "password",
                STRING,
                required=True,
                validations=(Validation(kind=ValidationKind.MIN_LENGTH, value=8),),
            ),
            field_def("remember_me", BOOL, default_value=False),
        ),
        inputs=(
            trigger_in("submit", "Submit the login form"),
            data_in("credentials", ANY),
        ),
        outputs=(
            data_out("user", entity("User")),
            data_out("token", STRING),
            trigger_out("success"),
            trigger_out("failure"),
            data_out("error", STRING),
        ),
        config=(
            option("require_email_verification", False),
            option("max_attempts", 5, min=1, max=100),
            option("lockout_duration", "15m"),
            option("session_duration", "24h"),
        ),
        tags=("auth", "login", "security"),
    )


def register() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.AUTH_REGISTER.value,
        name="Register",
        category=ComponentCategory.AUTH,
        description="New user registration",
        icon="user-plus",
        fields=(
            field_def("username", STRING, required=True),
            field_def("email", STRING, required=True, validations=_EMAIL),
            field_def("password", STRING, required=True),
            field_def("confirm_password", STRING, required=True),
            field_def("accept_terms", BOOL, default_value=False),
        ),
        inputs=(
            trigger_in("submit", "Submit the registration form"),
            data_in("user_data", ANY),
        ),
        outputs=(
            data_out("user", entity("User")),
            trigger_out("success"),
            trigger_out("failure"),
            data_out("error", STRING),
            data_out("validation_errors", JSON),
        ),
        config=(
            option("require_email_verification", True),
            option("auto_login", True),
            option("min_password_length", 8, min=4, max=128),
            option("require_password_uppercase", False),
            option("require_password_number", False),
            option("require_password_special", False),
        ),
        tags=("auth", "register", "signup"),
    )


def logout() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.AUTH_LOGOUT.value,
        name="Logout",
        category=ComponentCategory.AUTH,
        description="End the current user session",
        icon="log-out",
        inputs=(
            trigger_in("logout"),
            data_in("session", ANY),
        ),
        outputs=(
            trigger_out("success"),
            trigger_out("complete"),
        ),
        config=(
            option("invalidate_all_sessions", False),
            option("redirect_url", "/"),
            option("clear_cookies", True),
        ),
        tags=("auth", "logout"),
        default_height=100.0,
    )


def session() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.AUTH_SESSION.value,
        name="Session",
        category=ComponentCategory.AUTH,
        description="Session validation and token refresh",
        icon="key",
        inputs=(
            trigger_in("check"),
            trigger_in("refresh"),
            data_in("token", STRING),
        ),
        outputs=(
            data_out("user", entity("User")),
            data_out("session_data", JSON),
            trigger_out("valid"),
            trigger_out("invalid"),
            trigger_out("refreshed"),
            data_out("new_token", STRING),
        ),
        config=(
            option("auto_refresh", True),
            option("refresh_threshold", "5m"),
            option("storage", "cookie", options=("cookie", "local_storage", "memory")),
            option("secure_only", True),
            option("secret_key", "${SESSION_SECRET}", config_type=ConfigType.SECRET),
        ),
        tags=("auth", "session", "token"),
    )


def auth_definitions() -> list[ComponentDefinition]:
    return [login(), register(), logout(), session()]
