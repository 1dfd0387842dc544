import pytest
from unittest.mock import AsyncMock, MagicMock
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from sessionguard.auth.capabilities import (
    ApiMfa,
    MfaCapability,
    WebAuthnCapability,
    browser_supports_webauthn,
    security_key_available,
)
from sessionguard.auth.identity import Identity
from sessionguard.auth.webauthn import BrowserWebAuthn
from sessionguard.errors import ReauthError
from conftest import FakeSessionApi


class TestSecurityKeyAvailable:

    @pytest.mark.parametrize("require_mfa,has_keys,platform,expected", [
        (True, True, True, True),
        (True, True, False, False),
        (True, False, True, False),
        (False, True, True, False),
    ])
    def test_all_three_required(self, require_mfa, has_keys, platform, expected):
        identity = Identity(username='admin', require_mfa=require_mfa, has_security_keys=has_keys)
        assert security_key_available(identity, platform) is expected

    def test_identity_logged_in(self):
        assert Identity(username='admin').is_logged_in
        assert not Identity().is_logged_in


class TestBrowserProbe:

    async def test_supported(self):
        client = MagicMock()
        client.run_javascript = AsyncMock(return_value=True)
        assert await browser_supports_webauthn(client) is True

    async def test_probe_failure_means_unsupported(self):
        client = MagicMock()
        client.run_javascript = AsyncMock(side_effect=TimeoutError())
        assert await browser_supports_webauthn(client) is False


class TestApiMfa:

    async def test_submits_code_through_api(self):
        api = FakeSessionApi()
        mfa = ApiMfa(api)
        assert isinstance(mfa, MfaCapability)

        await mfa.submit_code('123456')

        assert api.mfa_codes == ['123456']


class TestBrowserWebAuthn:

    def make(self, result=None, error=None):
        api = FakeSessionApi()
        api.webauthn_login = AsyncMock()
        client = MagicMock()
        client.run_javascript = AsyncMock(return_value=result, side_effect=error)
        return BrowserWebAuthn(api, client), api, client

    async def test_assertion_posted_back(self):
        credential = {'id': 'cred', 'type': 'public-key', 'response': {}}
        webauthn, api, client = self.make(result=credential)
        assert isinstance(webauthn, WebAuthnCapability)

        await webauthn.start_login('admin')

        script = client.run_javascript.call_args.args[0]
        assert '"challenge": "abc"' in script
        api.webauthn_login.assert_awaited_once_with('admin', credential)

    async def test_browser_error_raised(self):
        webauthn, api, _ = self.make(result={'error': 'The operation was not allowed.'})

        with pytest.raises(ReauthError) as exc:
            await webauthn.start_login('admin')

        assert exc.value.message == 'The operation was not allowed.'
        api.webauthn_login.assert_not_awaited()

    async def test_timeout_raised_as_reauth_error(self):
        webauthn, _, _ = self.make(error=TimeoutError())
        with pytest.raises(ReauthError):
            await webauthn.start_login('admin')

    async def test_unexpected_result_has_no_message(self):
        webauthn, _, _ = self.make(result=None)
        with pytest.raises(ReauthError) as exc:
            await webauthn.start_login('admin')
        assert exc.value.message is None
