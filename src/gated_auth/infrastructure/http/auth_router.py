"""FastAPI router exposing the login and signup form endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.datastructures import FormData

from gated_auth.application.services.login_service import LoginRequest, LoginService
from gated_auth.application.services.signup_service import SignupRequest, SignupService
from gated_auth.domain.auth.results import Failure, Redirect, SignupSuccess
from gated_auth.infrastructure.http.client_headers import client_context_from_request


def build_auth_router(
    *,
    login_service: LoginService,
    signup_service: SignupService,
) -> APIRouter:
    """Build router translating protocol outcomes into HTTP responses."""

    router = APIRouter(tags=["auth"])

    @router.post("/login")
    async def login(request: Request) -> Response:
        """Authenticate a form submission and redirect with a session cookie."""

        form = await request.form()
        client = client_context_from_request(request)
        result = await login_service.login(
            LoginRequest(
                username=_form_text(form, "username"),
                password=_form_text(form, "password"),
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
        )

        if isinstance(result, Redirect):
            return _redirect_response(result)
        return _failure_response(result)

    @router.post("/signup")
    async def signup(request: Request) -> Response:
        """Create one account after invite and qualifying-score checks."""

        form = await request.form()
        result = await signup_service.signup(
            SignupRequest(
                username=_form_text(form, "username"),
                password=_form_text(form, "password"),
                confirm_password=_form_text(form, "confirmPassword"),
                invite_key=_form_text(form, "inviteKey"),
                iq_override=_form_text(form, "iqOverride"),
                session_id=_form_text(form, "sessionId"),
                client_score=_form_text(form, "iqScore"),
            )
        )

        if isinstance(result, SignupSuccess):
            return JSONResponse(status_code=200, content=result.to_payload())
        return _failure_response(result)

    return router


def _form_text(form: FormData, name: str) -> str | None:
    """Return one text form field; uploads and missing fields read as None."""

    value = form.get(name)
    if isinstance(value, str):
        return value
    return None


def _redirect_response(result: Redirect) -> Response:
    response = RedirectResponse(url=result.location, status_code=303)
    cookie = result.cookie
    if cookie is not None:
        response.set_cookie(
            key=cookie.name,
            value=cookie.value,
            max_age=cookie.max_age,
            path=cookie.path,
            secure=cookie.secure,
            httponly=cookie.http_only,
            samesite=cookie.same_site,
        )
    return response


def _failure_response(result: Failure) -> Response:
    return JSONResponse(status_code=result.status_code, content=result.to_payload())
