"""
Saleor content source.

Reads untranslated entities and writes translations through the Saleor
GraphQL API. Listing walks the connection with cursor pagination; an entity
counts as untranslated when `translation(languageCode: ...)` is null.

Setup:
    SALEOR_API_ENDPOINT=https://shop.example.com/graphql/
    SALEOR_AUTH_TOKEN=...   (app token with MANAGE_TRANSLATIONS)
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from storeglot.config import Settings, get_settings
from storeglot.core.errors import ContentSourceError
from storeglot.sources.base import ContentSource, TranslatableEntity, get_entity_type

logger = logging.getLogger(__name__)

# entity type -> (connection query field, translate mutation)
OPERATIONS: dict[str, tuple[str, str]] = {
    "product": ("products", "productTranslate"),
    "category": ("categories", "categoryTranslate"),
    "collection": ("collections", "collectionTranslate"),
    "attribute": ("attributes", "attributeTranslate"),
}

LIST_QUERY = """
query List%(type)s($first: Int!, $after: String, $languageCode: LanguageCodeEnum!) {
  %(connection)s(first: $first, after: $after) {
    edges {
      node {
        id
        %(fields)s
        translation(languageCode: $languageCode) { id }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

TRANSLATE_MUTATION = """
mutation Translate%(type)s($id: ID!, $languageCode: LanguageCodeEnum!, $input: %(input)s!) {
  %(mutation)s(id: $id, languageCode: $languageCode, input: $input) {
    errors { field message }
  }
}
"""

INPUT_TYPES = {
    "product": "TranslationInput",
    "category": "TranslationInput",
    "collection": "TranslationInput",
    "attribute": "NameTranslationInput",
}


def to_saleor_language(code: str) -> str:
    """`pt-br` -> `PT_BR`, as in Saleor's LanguageCodeEnum."""
    return code.strip().replace("-", "_").upper()


class SaleorSource(ContentSource):
    """
    Saleor GraphQL client.

    Args:
        endpoint: GraphQL URL
        auth_token: App or staff token; sent as a Bearer header when set
        page_size: Connection page size
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass `httpx.MockTransport`)
    """

    def __init__(
        self,
        endpoint: str,
        auth_token: str = "",
        page_size: int = 50,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not endpoint:
            raise ContentSourceError("SALEOR_API_ENDPOINT not set")
        self.endpoint = endpoint
        self.auth_token = auth_token
        self.page_size = page_size
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> SaleorSource:
        settings = settings or get_settings()
        return cls(
            endpoint=settings.saleor_api_endpoint,
            auth_token=settings.saleor_auth_token,
            page_size=settings.saleor_page_size,
            timeout=settings.request_timeout_seconds,
        )

    @property
    def headers(self) -> dict[str, str]:
        if not self.auth_token:
            return {}
        return {"Authorization": f"Bearer {self.auth_token}"}

    async def execute(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run one GraphQL operation and return its `data`."""
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(
                    self.endpoint,
                    json={"query": query, "variables": variables},
                    headers=self.headers,
                )
        except httpx.HTTPError as e:
            raise ContentSourceError(f"Saleor request failed: {e}") from e

        if response.status_code >= 400:
            raise ContentSourceError(f"Saleor returned HTTP {response.status_code}")
        body = response.json()
        if body.get("errors"):
            messages = "; ".join(str(error.get("message", error)) for error in body["errors"])
            raise ContentSourceError(f"Saleor GraphQL error: {messages}")
        return body.get("data") or {}

    # =========================================================================
    # Reading
    # =========================================================================

    async def list_untranslated(self, content_type: str, target_language: str) -> list[TranslatableEntity]:
        entity_type = get_entity_type(content_type)
        connection, _ = OPERATIONS[content_type]
        field_names = [f.name for f in entity_type.fields]
        query = LIST_QUERY % {
            "type": connection.capitalize(),
            "connection": connection,
            "fields": " ".join(field_names),
        }

        entities: list[TranslatableEntity] = []
        cursor: str | None = None
        while True:
            data = await self.execute(
                query,
                {
                    "first": self.page_size,
                    "after": cursor,
                    "languageCode": to_saleor_language(target_language),
                },
            )
            page = data.get(connection) or {}
            for edge in page.get("edges", []):
                node = edge["node"]
                if node.get("translation"):
                    continue
                entities.append(
                    TranslatableEntity(
                        id=node["id"],
                        content_type=content_type,
                        name=node.get("name") or "",
                        fields={name: node[name] for name in field_names if node.get(name)},
                    )
                )

            page_info = page.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")

        logger.info("Found %d untranslated %s entities for %s", len(entities), content_type, target_language)
        return entities

    # =========================================================================
    # Writing
    # =========================================================================

    async def write_translation(
        self,
        entity: TranslatableEntity,
        target_language: str,
        translations: dict[str, str],
    ) -> None:
        if not translations:
            return
        _, mutation = OPERATIONS[entity.content_type]
        query = TRANSLATE_MUTATION % {
            "type": entity.content_type.capitalize(),
            "input": INPUT_TYPES[entity.content_type],
            "mutation": mutation,
        }
        data = await self.execute(
            query,
            {
                "id": entity.id,
                "languageCode": to_saleor_language(target_language),
                "input": translations,
            },
        )
        errors = (data.get(mutation) or {}).get("errors") or []
        if errors:
            details = "; ".join(f"{e.get('field')}: {e.get('message')}" for e in errors)
            raise ContentSourceError(f"Saleor rejected translation of {entity.id}: {details}")
        logger.debug("Wrote %s translation of %s", target_language, entity.id)
