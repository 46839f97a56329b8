from __future__ import annotations

import pytest

from doyence.database import BackendUnavailableError
from doyence.models.auth_models import AuthErrorCode
from doyence.models.enums import OtpType, ToastVariant
from doyence.services.auth_service import AuthService


@pytest.fixture
def auth(provider, notifier, config, logger):
    return AuthService(provider=provider, notifier=notifier, config=config, logger=logger)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("email", ["", "   ", "not-an-email", "a@b", "a b@c.test"])
def test_invalid_emails(email):
    assert AuthService.validate_email(email).is_valid is False


def test_valid_email():
    assert AuthService.validate_email(" Someone@Example.com ").is_valid


def test_password_minimum_length():
    assert AuthService.validate_password("1234567").is_valid is False
    assert AuthService.validate_password("12345678").is_valid is True


def test_name_rejects_control_characters():
    result = AuthService.validate_name("Ada\nLovelace", "First name")
    assert result.is_valid is False
    assert "First name" in result.error_message


@pytest.mark.parametrize("token,valid", [("123456", True), (" 123456 ", True), ("12345", False), ("abcdef", False)])
def test_otp_format(token, valid):
    assert AuthService.validate_otp(token).is_valid is valid


def test_normalize_email():
    assert AuthService.normalize_email("  Ada@Example.COM ") == "ada@example.com"


# ---------------------------------------------------------------------------
# Sign-in
# ---------------------------------------------------------------------------


def test_sign_in_success(auth, provider, toasts):
    result = auth.sign_in(" Ada@Example.com", "correct horse")

    assert result.success
    assert result.email == "ada@example.com"
    assert provider.calls[0] == ("sign_in_with_password", ("ada@example.com", "correct horse"))
    assert [(t.title, t.description) for t in toasts] == [("Login successful", "Welcome back!")]


def test_sign_in_validation_skips_provider(auth, provider, toasts):
    result = auth.sign_in("ada@example.com", "short")

    assert result.success is False
    assert result.error_code == AuthErrorCode.VALIDATION_ERROR
    assert provider.calls == []
    assert toasts[0].title == "Login failed"


@pytest.mark.parametrize(
    "exc,code",
    [
        (Exception("Invalid login credentials"), AuthErrorCode.INVALID_CREDENTIALS),
        (Exception("Email not confirmed"), AuthErrorCode.EMAIL_NOT_CONFIRMED),
        (Exception("Request rate limit reached"), AuthErrorCode.RATE_LIMITED),
        (ConnectionError("reset by peer"), AuthErrorCode.NETWORK_ERROR),
        (TimeoutError(), AuthErrorCode.NETWORK_ERROR),
        (BackendUnavailableError("not configured"), AuthErrorCode.NETWORK_ERROR),
        (RuntimeError("boom"), AuthErrorCode.UNKNOWN_ERROR),
    ],
)
def test_sign_in_error_classification(auth, provider, toasts, exc, code):
    provider.sign_in_error = exc

    result = auth.sign_in("ada@example.com", "correct horse")

    assert result.success is False
    assert result.error_code == code
    assert len(toasts) == 1
    assert toasts[0].title == "Login failed"
    assert toasts[0].variant == ToastVariant.DESTRUCTIVE
    assert toasts[0].description == result.error_message


# ---------------------------------------------------------------------------
# Registration and codes
# ---------------------------------------------------------------------------


def test_sign_up_sends_names_and_verify_redirect(auth, provider, toasts):
    result = auth.sign_up("Grace@Example.com", "password123", " Grace ", "Hopper", "password123")

    assert result.success
    assert result.user_id == "new-user"
    name, (email, _password, metadata, redirect_to) = provider.calls[0]
    assert name == "sign_up"
    assert email == "grace@example.com"
    assert metadata == {"first_name": "Grace", "last_name": "Hopper"}
    assert redirect_to == "https://app.doyence.test/verify"
    assert toasts[0].title == "Registration successful"


def test_sign_up_password_mismatch(auth, provider):
    result = auth.sign_up("grace@example.com", "password123", "Grace", "Hopper", "password124")

    assert result.error_code == AuthErrorCode.VALIDATION_ERROR
    assert provider.calls == []


def test_sign_up_existing_account(auth, provider, toasts):
    provider.sign_up_error = Exception("User already registered")

    result = auth.sign_up("grace@example.com", "password123", "Grace", "Hopper")

    assert result.error_code == AuthErrorCode.EMAIL_ALREADY_EXISTS
    assert toasts[0].title == "Registration failed"


def test_verify_otp(auth, provider, toasts):
    result = auth.verify_otp("grace@example.com", " 123456 ")

    assert result.success
    assert provider.calls[0] == ("verify_otp", ("grace@example.com", "123456", OtpType.SIGNUP))
    assert toasts[0].title == "Email verified"


def test_verify_otp_expired(auth, provider, toasts):
    provider.verify_error = Exception("Token has expired or is invalid")

    result = auth.verify_otp("grace@example.com", "123456")

    assert result.error_code == AuthErrorCode.INVALID_OTP
    assert toasts[0].title == "Verification failed"


def test_resend_otp(auth, provider, toasts):
    result = auth.resend_otp("grace@example.com")

    assert result.success
    assert provider.calls[0] == (
        "resend",
        ("grace@example.com", "https://app.doyence.test/verify", OtpType.SIGNUP),
    )
    assert toasts[0].title == "Verification email resent"


def test_resend_otp_failure(auth, provider, toasts):
    provider.resend_error = Exception("For security purposes, you can only request this once every 60 seconds")

    result = auth.resend_otp("grace@example.com")

    assert result.error_code == AuthErrorCode.RATE_LIMITED
    assert toasts[0].title == "Failed to resend verification email"


# ---------------------------------------------------------------------------
# Sign-out
# ---------------------------------------------------------------------------


def test_sign_out(auth, provider, toasts, logger):
    result = auth.sign_out(reason="inactivity")

    assert result.success
    assert provider.call_names() == ["sign_out"]
    assert toasts[0].title == "Logged out"
    assert any(extra.get("reason") == "inactivity" for _l, _m, extra in logger.records)


def test_sign_out_failure(auth, provider, toasts):
    provider.sign_out_error = ConnectionError("offline")

    result = auth.sign_out()

    assert result.success is False
    assert result.error_code == AuthErrorCode.NETWORK_ERROR
    assert toasts[0].title == "Error signing out"


# ---------------------------------------------------------------------------
# Magic-link fragment
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "fragment,expected",
    [
        ("access_token=a&refresh_token=b", True),
        ("#access_token=a", True),
        ("type=signup", False),
        ("", False),
    ],
)
def test_fragment_has_tokens(fragment, expected):
    assert AuthService.fragment_has_tokens(fragment) is expected


def test_exchange_fragment_success(auth, provider, toasts):
    result = auth.exchange_session_fragment("access_token=tok&refresh_token=ref&type=signup")

    assert result.success
    assert result.user_id == "magic-user"
    assert provider.calls[0] == ("set_session", ("tok", "ref"))
    assert toasts == []


def test_exchange_fragment_with_provider_error(auth, provider, toasts):
    result = auth.exchange_session_fragment(
        "error=access_denied&error_description=Email+link+is+invalid+or+has+expired"
    )

    assert result.success is False
    assert result.error_code == AuthErrorCode.INVALID_OTP
    assert result.error_message == "Email link is invalid or has expired"
    assert provider.calls == []
    assert toasts[0].title == "Sign-in link failed"


def test_exchange_fragment_missing_refresh_token(auth, provider):
    result = auth.exchange_session_fragment("access_token=tok")

    assert result.success is False
    assert provider.calls == []
