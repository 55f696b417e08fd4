import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Type, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from user_account_svc.config import Settings
from user_account_svc.security import PasswordHasher, TokenIssuer
from user_account_svc.store import UserStore

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
MAX_FORM_FIELDS = 50000

BodyModel = TypeVar("BodyModel", bound=BaseModel)


@dataclass
class AppContext:
    """Process-wide collaborators, built once by `create_app`."""
    settings: Settings
    store: UserStore
    hasher: PasswordHasher
    tokens: TokenIssuer

    @classmethod
    def from_settings(cls, settings: Settings, store: UserStore | None = None) -> "AppContext":
        if store is None:
            store = UserStore(settings.mongo_uri, settings.mongo_db_name)
        return cls(
            settings=settings,
            store=store,
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            tokens=TokenIssuer(settings.secret_key.get_secret_value()),
        )


def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def read_body_fields(request: Request) -> Any:
    """
    Read the request body as JSON or as form fields, depending on its content type.

    An empty body reads as an empty object.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form(max_fields=MAX_FORM_FIELDS)
        return dict(form)

    if not await request.body():
        return {}
    try:
        return await request.json()
    except json.JSONDecodeError as e:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body", e.pos), "msg": "JSON decode error", "input": {}}]
        ) from e


def parsed_body(model: Type[BodyModel]) -> Callable:
    """
    Build a dependency validating the request body, JSON or form-encoded, into `model`.
    """
    async def dependency(request: Request) -> BodyModel:
        data = await read_body_fields(request)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            errors = [{**error, "loc": ("body", *error["loc"])} for error in e.errors(include_url=False)]
            raise RequestValidationError(errors) from e

    return dependency


def body_openapi(model: Type[BaseModel]) -> Dict[str, Any]:
    """`openapi_extra` documenting a body read by `parsed_body`."""
    schema = model.model_json_schema()
    return {
        "requestBody": {
            "content": {
                "application/json": {"schema": schema},
                "application/x-www-form-urlencoded": {"schema": schema},
            }
        }
    }
