"""
VKClient - thin async client for the VK social-graph API.

Every request goes through a shared RateLimiter and is mapped onto the
fetch error taxonomy:
- network failure / timeout       -> TransportError
- non-200 HTTP status              -> UpstreamError
- {"error": {...}} envelope        -> UpstreamError (VK error_code)
- body not JSON / no "response"    -> DecodeError
- users.get returned nothing       -> NotFound

Usage:
    async with VKClient(access_token, RateLimiter(0.35)) as client:
        user = await client.get_user(162400179)
        followers = await client.get_followers(user.id)
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import httpx

from ..exceptions import DecodeError, NotFound, TransportError, UpstreamError
from ..models import GroupEntity, PersonEntity
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.vk.com/method/"
DEFAULT_API_VERSION = "5.131"

USER_FIELDS = "screen_name,sex,city"

# VK maximums per request
FOLLOWERS_PAGE_SIZE = 1000
GROUPS_BATCH_SIZE = 500


@dataclass
class Subscriptions:
    """users.getSubscriptions result split by target kind"""
    users: List[int] = field(default_factory=list)
    groups: List[int] = field(default_factory=list)


class VKClient:
    """Async VK API client (httpx)"""

    def __init__(
        self,
        access_token: str,
        rate_limiter: Optional[RateLimiter] = None,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.access_token = access_token
        self.rate_limiter = rate_limiter or RateLimiter()
        self.base_url = base_url if base_url.endswith('/') else base_url + '/'
        self.api_version = api_version
        self.timeout = timeout
        self.client = http_client
        self._owns_client = http_client is None
        self.requests_made = 0

    async def _ensure_client(self):
        """Ensure httpx client exists."""
        if self.client is None or self.client.is_closed:
            self.client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True

    async def close(self):
        """Close the client if we created it."""
        if self.client is not None and self._owns_client and not self.client.is_closed:
            await self.client.aclose()

    async def __aenter__(self):
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _call(self, method: str, params: Dict[str, Any]) -> Any:
        """
        Call one API method and return the payload under "response".

        The access token is attached here and never logged.
        """
        await self._ensure_client()
        await self.rate_limiter.acquire()

        query = dict(params)
        query['access_token'] = self.access_token
        query['v'] = self.api_version

        logger.debug(f"→ {method} {params}")
        self.requests_made += 1

        try:
            response = await self.client.get(self.base_url + method, params=query)
        except httpx.HTTPError as e:
            raise TransportError(f"{method}: request failed: {e!r}") from e

        if response.status_code != 200:
            raise UpstreamError(response.status_code, response.reason_phrase or "bad response status", method)

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"{method}: response is not JSON") from e

        if not isinstance(data, dict):
            raise DecodeError(f"{method}: unexpected response body {type(data).__name__}")

        if 'error' in data:
            error = data['error'] if isinstance(data['error'], dict) else {}
            try:
                code = int(error.get('error_code', -1))
            except (TypeError, ValueError):
                code = -1
            raise UpstreamError(
                code,
                error.get('error_msg', str(data['error'])),
                method,
            )

        if 'response' not in data:
            raise DecodeError(f"{method}: missing 'response' key")

        return data['response']

    @staticmethod
    def _items(payload: Any, method: str) -> List[int]:
        """Extract identities from a {"count": n, "items": [...]} block"""
        if not isinstance(payload, dict) or not isinstance(payload.get('items'), list):
            raise DecodeError(f"{method}: expected an items list")

        ids = []
        for item in payload['items']:
            # items are plain ids unless fields were requested
            if isinstance(item, dict):
                item = item.get('id')
            try:
                ids.append(int(item))
            except (TypeError, ValueError) as e:
                raise DecodeError(f"{method}: bad identity {item!r}") from e
        return ids

    # =========================================================================
    # API methods
    # =========================================================================

    async def get_user(self, user_id: int) -> PersonEntity:
        """Fetch one user's profile (users.get)"""
        payload = await self._call('users.get', {
            'user_ids': user_id,
            'fields': USER_FIELDS,
        })

        if not isinstance(payload, list):
            raise DecodeError("users.get: expected a list")
        if not payload:
            raise NotFound(f"users.get: no user {user_id}")

        try:
            return PersonEntity.from_api(payload[0])
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"users.get: malformed user {user_id}") from e

    async def get_followers(self, user_id: int, limit: Optional[int] = None) -> List[int]:
        """
        Fetch follower identities (users.getFollowers), following pages.

        Args:
            user_id: Whose followers
            limit: Stop after this many identities (None = all)

        Returns:
            Follower ids in API order
        """
        followers: List[int] = []
        offset = 0

        while limit is None or len(followers) < limit:
            page_size = FOLLOWERS_PAGE_SIZE
            if limit is not None:
                page_size = min(page_size, limit - len(followers))

            payload = await self._call('users.getFollowers', {
                'user_id': user_id,
                'offset': offset,
                'count': page_size,
            })
            page = self._items(payload, 'users.getFollowers')
            followers.extend(page)
            offset += len(page)

            total = payload.get('count', offset)
            if not page or offset >= total:
                break

        if limit is not None:
            followers = followers[:limit]

        logger.debug(f"users.getFollowers({user_id}): {len(followers)} followers")
        return followers

    async def get_subscriptions(self, user_id: int, limit: Optional[int] = None) -> Subscriptions:
        """
        Fetch subscribed users and groups (users.getSubscriptions, non-extended).

        limit caps each list separately.
        """
        payload = await self._call('users.getSubscriptions', {'user_id': user_id})
        if not isinstance(payload, dict):
            raise DecodeError("users.getSubscriptions: expected an object")

        users = self._items(payload.get('users', {'items': []}), 'users.getSubscriptions')
        groups = self._items(payload.get('groups', {'items': []}), 'users.getSubscriptions')

        if limit is not None:
            users = users[:limit]
            groups = groups[:limit]

        logger.debug(f"users.getSubscriptions({user_id}): {len(users)} users, {len(groups)} groups")
        return Subscriptions(users=users, groups=groups)

    async def get_groups(self, group_ids: Iterable[int]) -> List[GroupEntity]:
        """Fetch group details (groups.getById), batched"""
        ids = list(group_ids)
        groups: List[GroupEntity] = []

        for start in range(0, len(ids), GROUPS_BATCH_SIZE):
            batch = ids[start:start + GROUPS_BATCH_SIZE]
            payload = await self._call('groups.getById', {
                'group_ids': ','.join(str(group_id) for group_id in batch),
            })

            # API 5.194+ wraps the list as {"groups": [...]}
            if isinstance(payload, dict):
                payload = payload.get('groups')
            if not isinstance(payload, list):
                raise DecodeError("groups.getById: expected a list")

            try:
                groups.extend(GroupEntity.from_api(item) for item in payload)
            except (KeyError, TypeError, ValueError) as e:
                raise DecodeError("groups.getById: malformed group") from e

        return groups
