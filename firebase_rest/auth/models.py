"""Firebase Auth REST API client models."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing_extensions import Self

from firebase_rest.errors import InvalidArgumentException
from firebase_rest.utilities.dt import to_utc_datetime

# Request variants


class AuthRequest(BaseModel):
    """
    Base of the typed request bodies. Builders return modified copies,
    a request is never changed in place.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def new(cls) -> Self:
        return cls()

    def _with(self, **changes: Any) -> Self:
        return self.model_copy(update=changes)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CreateUserRequest(AuthRequest):
    """
    Body of the `signupNewUser` action.
    """

    uid: str | None = Field(alias="localId", default=None)
    email: EmailStr | None = None
    email_verified: bool | None = Field(alias="emailVerified", default=None)
    display_name: str | None = Field(alias="displayName", default=None)
    photo_url: str | None = Field(alias="photoUrl", default=None)
    phone_number: str | None = Field(alias="phoneNumber", default=None)
    password: str | None = None
    disabled: bool | None = None

    def with_uid(self, uid: str) -> Self:
        return self._with(uid=uid)

    def with_verified_email(self, email: str) -> Self:
        return self._with(email=email, email_verified=True)

    def with_unverified_email(self, email: str) -> Self:
        return self._with(email=email, email_verified=False)

    def with_display_name(self, display_name: str) -> Self:
        return self._with(display_name=display_name)

    def with_photo_url(self, photo_url: str) -> Self:
        return self._with(photo_url=photo_url)

    def with_phone_number(self, phone_number: str) -> Self:
        return self._with(phone_number=phone_number)

    def with_password(self, password: str) -> Self:
        return self._with(password=password)

    def mark_as_disabled(self) -> Self:
        return self._with(disabled=True)

    def mark_as_enabled(self) -> Self:
        return self._with(disabled=False)


class UpdateUserRequest(AuthRequest):
    """
    Body of the `setAccountInfo` action.

    Removing the display name or photo URL goes through
    `deleteAttribute`, removing the phone number through
    `deleteProvider`.
    """

    uid: str | None = Field(alias="localId", default=None)
    email: EmailStr | None = None
    email_verified: bool | None = Field(alias="emailVerified", default=None)
    display_name: str | None = Field(alias="displayName", default=None)
    photo_url: str | None = Field(alias="photoUrl", default=None)
    phone_number: str | None = Field(alias="phoneNumber", default=None)
    password: str | None = None
    disable_user: bool | None = Field(alias="disableUser", default=None)
    custom_attributes: str | None = Field(
        alias="customAttributes", default=None
    )
    delete_attribute: tuple[str, ...] | None = Field(
        alias="deleteAttribute", default=None
    )
    delete_provider: tuple[str, ...] | None = Field(
        alias="deleteProvider", default=None
    )
    valid_since: int | None = Field(alias="validSince", default=None)

    def _adding(self, field: str, item: str) -> Self:
        current = getattr(self, field) or ()
        if item in current:
            return self
        return self._with(**{field: (*current, item)})

    def with_uid(self, uid: str) -> Self:
        return self._with(uid=uid)

    def with_email(self, email: str) -> Self:
        return self._with(email=email)

    def mark_email_as_verified(self) -> Self:
        return self._with(email_verified=True)

    def mark_email_as_unverified(self) -> Self:
        return self._with(email_verified=False)

    def with_display_name(self, display_name: str) -> Self:
        return self._with(display_name=display_name)

    def with_removed_display_name(self) -> Self:
        return self._with(display_name=None)._adding(
            "delete_attribute", "DISPLAY_NAME"
        )

    def with_photo_url(self, photo_url: str) -> Self:
        return self._with(photo_url=photo_url)

    def with_removed_photo_url(self) -> Self:
        return self._with(photo_url=None)._adding(
            "delete_attribute", "PHOTO_URL"
        )

    def with_phone_number(self, phone_number: str) -> Self:
        return self._with(phone_number=phone_number)

    def with_removed_phone_number(self) -> Self:
        return self._with(phone_number=None)._adding(
            "delete_provider", "phone"
        )

    def with_password(self, password: str) -> Self:
        return self._with(password=password)

    def with_custom_attributes(self, attributes: Mapping[str, Any]) -> Self:
        return self._with(
            custom_attributes=orjson.dumps(dict(attributes)).decode()
        )

    def mark_as_disabled(self) -> Self:
        return self._with(disable_user=True)

    def mark_as_enabled(self) -> Self:
        return self._with(disable_user=False)


def normalize_request(data: AuthRequest | Mapping[str, Any] | None) -> dict:
    """
    Turns any accepted request shape into the JSON body. An empty
    request still yields an object, so it is sent as `{}`.

    Raises:
        InvalidArgumentException: If `data` is neither a request variant
            nor a mapping.
    """
    if data is None:
        return {}
    if isinstance(data, AuthRequest):
        return data.to_payload()
    if isinstance(data, Mapping):
        return dict(data)
    raise InvalidArgumentException(
        f"Unsupported request type {type(data).__name__}"
    )


# Responses


class UserRecord(BaseModel):
    """
    A user as returned by `getAccountInfo` and `downloadAccount`.

    Description from Firebase doc:

    localId (str): The uid of the user.
    createdAt (str): The timestamp, in milliseconds, that the account
        was created at.
    lastLoginAt (str): The timestamp, in milliseconds, that the account
        last logged in at.
    passwordUpdatedAt (float): The timestamp, in milliseconds, that the
        account password was last changed.
    validSince (str): The timestamp, in seconds, which marks a boundary,
        before which Firebase ID tokens are considered revoked.
    lastRefreshAt (str): RFC 3339 timestamp of the last token refresh.
    customAttributes (str): JSON encoded custom claims.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uid: str = Field(alias="localId")
    email: EmailStr | None = None
    email_verified: bool = Field(alias="emailVerified", default=False)
    display_name: str | None = Field(alias="displayName", default=None)
    photo_url: str | None = Field(alias="photoUrl", default=None)
    phone_number: str | None = Field(alias="phoneNumber", default=None)
    disabled: bool = False
    provider_user_info: list[dict] = Field(
        alias="providerUserInfo", default_factory=list
    )
    custom_attributes: dict = Field(
        alias="customAttributes", default_factory=dict
    )
    created_at: datetime | None = Field(alias="createdAt", default=None)
    last_login_at: datetime | None = Field(alias="lastLoginAt", default=None)
    password_updated_at: datetime | None = Field(
        alias="passwordUpdatedAt", default=None
    )
    valid_since: datetime | None = Field(alias="validSince", default=None)
    last_refresh_at: datetime | None = Field(
        alias="lastRefreshAt", default=None
    )

    @field_validator(
        "created_at", "last_login_at", "password_updated_at", mode="before"
    )
    @classmethod
    def from_milliseconds(cls, value: Any) -> datetime | None:
        return to_utc_datetime(value, unit="ms") if value is not None else None

    @field_validator("valid_since", mode="before")
    @classmethod
    def from_seconds(cls, value: Any) -> datetime | None:
        return to_utc_datetime(value, unit="s") if value is not None else None

    @field_validator("last_refresh_at", mode="before")
    @classmethod
    def from_any(cls, value: Any) -> datetime | None:
        return to_utc_datetime(value) if value is not None else None

    @field_validator("custom_attributes", mode="before")
    @classmethod
    def decode_custom_attributes(cls, value: Any) -> dict:
        if not value:
            return {}
        if isinstance(value, str):
            return orjson.loads(value)
        return value


class AccountInfoResponse(BaseModel):
    """
    Response model for the `getAccountInfo` action.
    """

    kind: str | None = None
    users: list[UserRecord] = Field(default_factory=list)


class DownloadAccountResponse(BaseModel):
    """
    Response model for the `downloadAccount` action. `next_page_token`
    is None on the last page.
    """

    model_config = ConfigDict(populate_by_name=True)

    users: list[UserRecord] = Field(default_factory=list)
    next_page_token: str | None = Field(alias="nextPageToken", default=None)


class IdTokenResponse(BaseModel):
    """
    Response model for actions returning tokens (`verifyCustomToken`,
    `verifyPassword`).

    idToken (str): A Firebase Auth ID token.
    refreshToken (str): A Firebase Auth refresh token.
    expiresIn (str): The number of seconds in which the ID token expires.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id_token: str = Field(alias="idToken")
    refresh_token: str | None = Field(alias="refreshToken", default=None)
    expires_in: str | None = Field(alias="expiresIn", default=None)
    local_id: str | None = Field(alias="localId", default=None)
    email: EmailStr | None = None
    registered: bool | None = None
    is_new_user: bool | None = Field(alias="isNewUser", default=None)


class AccountResponse(BaseModel):
    """
    Response model for `signupNewUser` and `setAccountInfo`.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    local_id: str = Field(alias="localId")
    email: EmailStr | None = None
    email_verified: bool = Field(alias="emailVerified", default=False)
    display_name: str | None = Field(alias="displayName", default=None)
    photo_url: str | None = Field(alias="photoUrl", default=None)
    id_token: str | None = Field(alias="idToken", default=None)
    refresh_token: str | None = Field(alias="refreshToken", default=None)
    expires_in: str | None = Field(alias="expiresIn", default=None)


class OobCodeResponse(BaseModel):
    """
    Response model for the `getOobConfirmationCode` action.

    email (str): The email the message was sent to.
    """

    email: EmailStr | None = None
