"""
Browser-backed WebAuthn login.

The assertion itself has to happen in the browser: options are fetched from
the CMS, handed to navigator.credentials.get() through the NiceGUI client,
and the signed credential is posted back to the CMS.
"""

import json
import logging
from typing import Any, Dict

from sessionguard.errors import ReauthError
from sessionguard.session.api import SessionApi

logger = logging.getLogger(__name__)

# Decodes base64url fields of the options, runs the assertion and re-encodes
# the binary parts of the credential for JSON transport.
_ASSERTION_JS = '''
(async () => {
    const options = %s;
    const b64uToBuf = (s) => Uint8Array.from(atob(s.replace(/-/g, '+').replace(/_/g, '/')), c => c.charCodeAt(0));
    const bufToB64u = (b) => btoa(String.fromCharCode(...new Uint8Array(b))).replace(/\\+/g, '-').replace(/\\//g, '_').replace(/=+$/, '');
    options.challenge = b64uToBuf(options.challenge);
    (options.allowCredentials || []).forEach(c => { c.id = b64uToBuf(c.id); });
    try {
        const cred = await navigator.credentials.get({publicKey: options});
        return {
            id: cred.id,
            rawId: bufToB64u(cred.rawId),
            type: cred.type,
            response: {
                authenticatorData: bufToB64u(cred.response.authenticatorData),
                clientDataJSON: bufToB64u(cred.response.clientDataJSON),
                signature: bufToB64u(cred.response.signature),
                userHandle: cred.response.userHandle ? bufToB64u(cred.response.userHandle) : null,
            },
        };
    } catch (e) {
        return {error: e.message || String(e)};
    }
})()
'''

ASSERTION_TIMEOUT = 120.0


class BrowserWebAuthn:
    """WebAuthnCapability driven through a connected NiceGUI client."""

    def __init__(self, api: SessionApi, client):
        self._api = api
        self._client = client

    async def start_login(self, login_name: str) -> None:
        options = await self._api.webauthn_options(login_name)
        credential = await self._get_assertion(options)
        await self._api.webauthn_login(login_name, credential)
        logger.info("Security key assertion accepted")

    async def _get_assertion(self, options: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = await self._client.run_javascript(
                _ASSERTION_JS % json.dumps(options),
                timeout=ASSERTION_TIMEOUT,
            )
        except TimeoutError as e:
            raise ReauthError('The security key request timed out.') from e

        if not isinstance(result, dict):
            raise ReauthError(None)
        if 'error' in result:
            raise ReauthError(result.get('error') or None)
        return result
