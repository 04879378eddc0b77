import logging

import requests

from config import SHOPIFY_API_VERSION

logger = logging.getLogger(__name__)

GRAPHQL_TIMEOUT_SECONDS = 10


class ShopifyAPIError(Exception):
    """The Admin API could not be reached or returned a non-2xx response."""


class AdminClient:
    """
    Shopify Admin GraphQL API client for one shop's offline token.
    """

    def __init__(self, shop: str, access_token: str, session: requests.Session | None = None):
        self.shop = shop
        self.access_token = access_token
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"https://{self.shop}/admin/api/{SHOPIFY_API_VERSION}/graphql.json"

    def graphql(self, query: str, variables: dict | None = None) -> dict:
        payload = {"query": query}
        if variables is not None:
            payload["variables"] = variables

        try:
            resp = self._session.post(
                self.endpoint,
                json=payload,
                headers={
                    "X-Shopify-Access-Token": self.access_token,
                    "Content-Type": "application/json",
                },
                timeout=GRAPHQL_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error(f"[Shopify] GraphQL request to {self.shop} failed: {e}")
            raise ShopifyAPIError(f"Admin API unreachable for {self.shop}") from e

        if not resp.ok:
            logger.error(f"[Shopify] GraphQL {resp.status_code} from {self.shop}")
            raise ShopifyAPIError(f"Admin API returned {resp.status_code} for {self.shop}")

        body = resp.json()
        if body.get("errors"):
            # Partial data is still usable; missing products surface as null
            logger.warning(f"[Shopify] GraphQL errors from {self.shop}: {body['errors']}")
        return body
