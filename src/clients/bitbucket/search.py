"""Shared request/response handling for the indexed search endpoint.

Both repository and code search POST to the same endpoint and differ only
in the entity they ask for ('repositories' or 'code').
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from clients.bitbucket.client import SEARCH_PATH
from core.context import ToolContext
from core.errors import ExternalServiceError
from core.models import ServerConfig

logger = logging.getLogger(__name__)

_LOG_QUERY_CHARS = 100
_LOG_BODY_CHARS = 500
_ERROR_BODY_CHARS = 100


def build_search_body(query: str, *, entity: str, limit: int) -> Dict[str, Any]:
    # The code entity accepts no project/repo/path filters; callers filter afterwards
    return {
        "query": query,
        "entities": {entity: {}},
        "limits": {"primary": limit},
    }


def loggable_query(query: str) -> str:
    if len(query) > _LOG_QUERY_CHARS:
        return query[:_LOG_QUERY_CHARS] + "..."
    return query


async def search_entity(
    context: ToolContext,
    config: ServerConfig,
    *,
    query: str,
    entity: str,
    limit: int,
    label: str,
) -> Optional[Mapping[str, Any]]:
    """POST one indexed search and return the `entity` section.

    Returns None when the server answered but left the entity out (an empty
    result, not a failure). Raises ExternalServiceError for non-ok responses
    and for ok responses without a body.
    """
    response = await context.request(
        SEARCH_PATH,
        config=config,
        method="POST",
        params={"avatarSize": 64},
        json=build_search_body(query, entity=entity, limit=limit),
    )

    if not response.ok:
        body = response.text or ""
        logger.error(
            "Bitbucket %s search failed: query=%r status=%s status_text=%r body=%r",
            label,
            query,
            response.status,
            response.status_text,
            body[:_LOG_BODY_CHARS],
        )
        detail = f" - {body[:_ERROR_BODY_CHARS]}" if body else ""
        raise ExternalServiceError(
            f"Bitbucket {label} search failed: {response.status} {response.status_text}{detail}"
        )

    if response.data is None:
        logger.error("Bitbucket %s search returned no data: query=%r", label, query)
        raise ExternalServiceError(f"No data returned from Bitbucket {label} search")

    section = response.data.get(entity)
    if not section:
        logger.warning(
            "Bitbucket %s search returned no %s results: query=%r response_keys=%s",
            label,
            entity,
            query,
            sorted(response.data.keys()),
        )
        return None

    return section
