import logging
from typing import Any

from styngr.clients.cloud import CloudClient
from styngr.clients.region import RegionResolver
from styngr.errors import MissingFieldError

logger = logging.getLogger(__name__)

CONFIRM_PATH = "/v1/sdk/payments/confirm"
BILLING_TYPE = "BUNDLE"
PAY_TYPE = "NP"


class TransactionFlow:
    """Buys and confirms radio bundles so a user is entitled to playlists."""

    def __init__(self, cloud: CloudClient, regions: RegionResolver):
        self._cloud = cloud
        self._regions = regions

    @property
    def _app_id(self) -> str:
        return self._cloud.configuration.app_id

    async def get_available_radio_bundles(self, user_id: int) -> list[dict[str, Any]]:
        token = await self._cloud.get_token(user_id)
        result = await self._cloud.call(token, f"/v1/sdk/radio/{self._app_id}/bundle/available", "GET")

        body = result.json()
        if not isinstance(body, dict) or "availableRadioBundles" not in body:
            raise MissingFieldError(
                "availableRadioBundles",
                "Invalid response, no availableRadioBundles present in response.",
            )
        return body["availableRadioBundles"]

    async def create_transaction(self, token: str, bundle: str) -> str:
        """Start a bundle purchase and return its transaction id."""
        result = await self._cloud.call(
            token,
            f"/v1/sdk/radio/{self._app_id}/bundle/purchase",
            "POST",
            {"bundleToPurchase": bundle},
        )

        body = result.json()
        transaction_id = body.get("transactionId") if isinstance(body, dict) else None
        if not transaction_id:
            raise MissingFieldError(
                "transactionId", "No transactionId present on purchase body response"
            )
        return transaction_id

    async def confirm_transaction(self, user_id: int, transaction_id: str) -> None:
        country = await self._regions.country_for(user_id)
        await self._cloud.call_as_api(
            CONFIRM_PATH,
            "POST",
            {
                "trxId": transaction_id,
                "appId": self._app_id,
                "billingType": BILLING_TYPE,
                "payType": PAY_TYPE,
                "subscriptionId": "",
                "userIp": "",
                "billingCountry": country,
            },
        )

    async def create_and_confirm_transaction(self, user_id: int, bundle: str) -> str:
        """
        Purchase `bundle` for the user and confirm the payment.

        Runs every time it is called; whether a repeated purchase is harmless
        is up to the backend. Returns the transaction id.
        """
        token = await self._cloud.get_token(user_id)
        transaction_id = await self.create_transaction(token, bundle)
        await self.confirm_transaction(user_id, transaction_id)

        logger.info("Confirmed %s for user %s (transaction %s)", bundle, user_id, transaction_id)
        return transaction_id
