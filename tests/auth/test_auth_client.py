"""Tests for the Firebase Auth REST API client"""

import time

import httpx
import pytest

from firebase_rest.auth import (
    ApiClient,
    AuthException,
    CreateUserRequest,
    EmailNotFound,
    UpdateUserRequest,
)
from firebase_rest.errors import InvalidArgumentException
from tests.fakes import FakeAuthBackend

AUTH_URL = "https://www.googleapis.com/identitytoolkit/v3/relyingparty"
ACCOUNT = {"localId": "uid-1", "email": "ada@example.com"}
TOKENS = {"idToken": "id-token", "refreshToken": "refresh-token", "expiresIn": "3600"}


class TestRequests:
    """
    Unit tests for the request envelope shared by all actions
    """

    def test_action_url_and_key(self, auth_client: ApiClient, fake_auth: FakeAuthBackend):
        fake_auth.responses["deleteAccount"] = (200, {})
        auth_client.delete_user("uid-1")
        request = fake_auth.requests[0]
        assert request.method == "POST"
        assert str(request.url.copy_remove_param("key")) == f"{AUTH_URL}/deleteAccount"
        assert request.url.params["key"] == "test-api-key"
        assert fake_auth.last_body == {"localId": "uid-1"}

    def test_no_key_parameter_without_api_key(self, fake_auth: FakeAuthBackend):
        client = ApiClient(
            http_client=httpx.Client(transport=httpx.MockTransport(fake_auth)),
            base_url=AUTH_URL,
        )
        client.api_key = None
        client.request("deleteAccount", {"localId": "uid-1"})
        assert "key" not in fake_auth.requests[0].url.params

    def test_empty_request_is_an_object(
        self, auth_client: ApiClient, fake_auth: FakeAuthBackend
    ):
        """
        GIVEN a request without any field
        WHEN it is sent
        THEN check the body is an empty JSON object
        """
        fake_auth.responses["signupNewUser"] = (200, ACCOUNT)
        auth_client.create_user(CreateUserRequest.new())
        assert fake_auth.requests[0].content == b"{}"
        auth_client.create_user()
        assert fake_auth.requests[1].content == b"{}"

    def test_unsupported_request_type(self, auth_client: ApiClient):
        with pytest.raises(InvalidArgumentException):
            auth_client.request("signupNewUser", ["not", "a", "mapping"])

    def test_returns_body(self, auth_client: ApiClient):
        assert auth_client.request("deleteAccount") == {}

    def test_malformed_response_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>")

        client = ApiClient(
            api_key="key",
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
            base_url=AUTH_URL,
        )
        with pytest.raises(AuthException):
            client.request("getAccountInfo")

    def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        client = ApiClient(
            api_key="key",
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
            base_url=AUTH_URL,
        )
        with pytest.raises(AuthException) as exc_info:
            client.delete_user("uid-1")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectTimeout)

    def test_error_response(self, auth_client: ApiClient, fake_auth: FakeAuthBackend):
        fake_auth.responses["getAccountInfo"] = (
            400,
            {"error": {"code": 400, "message": "EMAIL_NOT_FOUND"}},
        )
        with pytest.raises(EmailNotFound) as exc_info:
            auth_client.get_user_by_email("nobody@example.com")
        assert exc_info.value.status_code == 400
        assert exc_info.value.url == f"{AUTH_URL}/getAccountInfo"


class TestActions:
    def test_exchange_custom_token(
        self, auth_client: ApiClient, fake_auth: FakeAuthBackend
    ):
        fake_auth.responses["verifyCustomToken"] = (200, TOKENS)
        response = auth_client.exchange_custom_token_for_id_and_refresh_token("custom")
        assert fake_auth.last_body == {"token": "custom", "returnSecureToken": True}
        assert response.id_token == "id-token"
        assert response.refresh_token == "refresh-token"

    def test_create_user(self, auth_client: ApiClient, fake_auth: FakeAuthBackend):
        fake_auth.responses["signupNewUser"] = (200, ACCOUNT)
        request = (
            CreateUserRequest.new()
            .with_verified_email("ada@example.com")
            .with_password("secret123")
        )
        response = auth_client.create_user(request)
        assert fake_auth.last_body == {
            "email": "ada@example.com",
            "emailVerified": True,
            "password": "secret123",
        }
        assert response.local_id == "uid-1"

    def test_create_user_from_mapping(
        self, auth_client: ApiClient, fake_auth: FakeAuthBackend
    ):
        fake_auth.responses["signupNewUser"] = (200, ACCOUNT)
        auth_client.create_user({"email": "ada@example.com"})
        assert fake_auth.last_body == {"email": "ada@example.com"}

    def test_update_user(self, auth_client: ApiClient, fake_auth: FakeAuthBackend):
        fake_auth.responses["setAccountInfo"] = (200, ACCOUNT)
        auth_client.update_user(
            UpdateUserRequest.new().with_uid("uid-1").with_removed_display_name()
        )
        assert fake_auth.last_body == {
            "localId": "uid-1",
            "deleteAttribute": ["DISPLAY_NAME"],
        }

    @pytest.mark.parametrize(
        "method, argument, body",
        [
            ("get_user_by_email", "ada@example.com", {"email": ["ada@example.com"]}),
            ("get_user_by_phone_number", "+15555550100", {"phoneNumber": ["+15555550100"]}),
            ("get_account_info", "uid-1", {"localId": ["uid-1"]}),
        ],
    )
    def test_get_account_info(
        self,
        auth_client: ApiClient,
        fake_auth: FakeAuthBackend,
        method: str,
        argument: str,
        body: dict,
    ):
        fake_auth.responses["getAccountInfo"] = (
            200,
            {"kind": "identitytoolkit#GetAccountInfoResponse", "users": [ACCOUNT]},
        )
        response = getattr(auth_client, method)(argument)
        assert fake_auth.last_body == body
        assert response.users[0].uid == "uid-1"

    def test_download_account_defaults(
        self, auth_client: ApiClient, fake_auth: FakeAuthBackend
    ):
        fake_auth.responses["downloadAccount"] = (200, {"users": [ACCOUNT]})
        page = auth_client.download_account()
        assert fake_auth.last_body == {"maxResults": 1000}
        assert page.next_page_token is None

    def test_download_account_next_page(
        self, auth_client: ApiClient, fake_auth: FakeAuthBackend
    ):
        auth_client.download_account(10, "token-2")
        assert fake_auth.last_body == {"maxResults": 10, "nextPageToken": "token-2"}

    def test_iter_users(self):
        """
        GIVEN two pages of users
        WHEN all users are iterated
        THEN check the second page is requested with the first page's token
        """
        pages = {
            None: {"users": [{"localId": "a"}, {"localId": "b"}], "nextPageToken": "p2"},
            "p2": {"users": [{"localId": "c"}]},
        }
        fake_auth = FakeAuthBackend()

        def handler(request: httpx.Request) -> httpx.Response:
            fake_auth.requests.append(request)
            token = fake_auth.last_body.get("nextPageToken")
            return httpx.Response(200, json=pages[token])

        client = ApiClient(
            api_key="key",
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
            base_url=AUTH_URL,
        )
        assert [user.uid for user in client.iter_users(2)] == ["a", "b", "c"]
        assert len(fake_auth.requests) == 2

    def test_verify_password(self, auth_client: ApiClient, fake_auth: FakeAuthBackend):
        fake_auth.responses["verifyPassword"] = (200, TOKENS)
        auth_client.verify_password("ada@example.com", "secret123")
        assert fake_auth.last_body == {
            "email": "ada@example.com",
            "password": "secret123",
            "returnSecureToken": True,
        }

    def test_send_email_verification(
        self, auth_client: ApiClient, fake_auth: FakeAuthBackend
    ):
        fake_auth.responses["getOobConfirmationCode"] = (200, {"email": "ada@example.com"})
        response = auth_client.send_email_verification(
            "id-token", "https://example.com/done", "de"
        )
        assert fake_auth.last_body == {
            "requestType": "VERIFY_EMAIL",
            "idToken": "id-token",
            "continueUrl": "https://example.com/done",
        }
        assert fake_auth.requests[0].headers["X-Firebase-Locale"] == "de"
        assert response.email == "ada@example.com"

    def test_send_password_reset_email_without_locale(
        self, auth_client: ApiClient, fake_auth: FakeAuthBackend
    ):
        auth_client.send_password_reset_email("ada@example.com")
        assert fake_auth.last_body == {
            "requestType": "PASSWORD_RESET",
            "email": "ada@example.com",
        }
        assert "X-Firebase-Locale" not in fake_auth.requests[0].headers

    def test_revoke_refresh_tokens(
        self, auth_client: ApiClient, fake_auth: FakeAuthBackend
    ):
        fake_auth.responses["setAccountInfo"] = (200, ACCOUNT)
        before = int(time.time())
        auth_client.revoke_refresh_tokens("uid-1")
        body = fake_auth.last_body
        assert body["localId"] == "uid-1"
        assert before <= body["validSince"] <= int(time.time())

    def test_unlink_provider(self, auth_client: ApiClient, fake_auth: FakeAuthBackend):
        fake_auth.responses["setAccountInfo"] = (200, ACCOUNT)
        auth_client.unlink_provider("uid-1", ["phone", "google.com"])
        assert fake_auth.last_body == {
            "localId": "uid-1",
            "deleteProvider": ["phone", "google.com"],
        }
