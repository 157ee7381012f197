"""GraphQL documents and transport helpers for the Podchaser catalog."""

from __future__ import annotations

from typing import Any

import httpx

ACCESS_TOKEN_MUTATION = """\
mutation RequestAccessToken($client_id: String!, $client_secret: String!) {
  requestAccessToken(
    input: {
      grant_type: CLIENT_CREDENTIALS
      client_id: $client_id
      client_secret: $client_secret
    }
  ) {
    access_token
    expires_in
    token_type
  }
}
"""

DISCOVER_CATEGORY_QUERY = """\
query DiscoverCategory(
  $searchTerm: String!
  $episodeCount: Int!
  $recentSince: DateTime
  $maxLengthRange: [RangeInput!]
) {
  podcasts(
    searchTerm: $searchTerm
    filters: { language: "en" }
    sort: { sortBy: DATE_OF_FIRST_EPISODE, direction: DESCENDING }
    first: 10
    page: 0
  ) {
    data {
      id
      title
      description
      imageUrl
      webUrl
      url
      ratingAverage
      ratingCount
      episodes(
        first: $episodeCount
        sort: { sortBy: AIR_DATE, direction: DESCENDING }
        filters: { airDate: { from: $recentSince }, length: $maxLengthRange }
      ) {
        data {
          id
          title
          description
          airDate
          audioUrl
          webUrl
          url
          imageUrl
          explicit
        }
      }
    }
  }
}
"""


class GraphQLResponse:
    """Decoded ``{data, errors}`` envelope plus the HTTP status."""

    __slots__ = ("data", "errors", "status_code")

    def __init__(
        self,
        status_code: int,
        data: dict[str, Any] | None,
        errors: list[dict[str, Any]],
    ) -> None:
        self.status_code = status_code
        self.data = data
        self.errors = errors

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300 and not self.errors

    def error_message(self) -> str:
        """Join GraphQL error messages, or describe the HTTP status."""
        messages = [str(err.get("message", "")) for err in self.errors]
        joined = ", ".join(m for m in messages if m)
        return joined or f"status {self.status_code}"


async def post_graphql(
    client: httpx.AsyncClient,
    endpoint: str,
    query: str,
    variables: dict[str, Any],
    token: str | None = None,
) -> GraphQLResponse:
    """POST a GraphQL document and decode the response envelope.

    Raises:
        httpx.HTTPError: On transport failure.
        ValueError: If the body is not JSON.
    """
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    response = await client.post(
        endpoint,
        headers=headers,
        json={"query": query, "variables": variables},
    )
    payload = response.json()
    if not isinstance(payload, dict):
        payload = {}

    data = payload.get("data")
    errors = payload.get("errors") or []
    return GraphQLResponse(
        status_code=response.status_code,
        data=data if isinstance(data, dict) else None,
        errors=[err for err in errors if isinstance(err, dict)],
    )
