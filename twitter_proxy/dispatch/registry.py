# Registry mapping packaged method names to client library operations.

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from twitter_proxy.exceptions import UnsupportedMethodError

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True)
class PackagedMethod:
    """A sub-resource accessor on the client and an operation on that sub-resource."""

    accessor: str
    operation: str

    def resolve(self, client: Any) -> Callable[..., Any]:
        """Return the bound operation for this client."""
        return getattr(getattr(client, self.accessor)(), self.operation)


# Registry mapping method names (as sent by callers) to client operations.
# New methods only need a line here.
PACKAGED_METHODS: Dict[str, PackagedMethod] = {
    "getUserByScreenName": PackagedMethod("get_user_api", "get_user_by_screen_name"),
    "getUserByRestId": PackagedMethod("get_user_api", "get_user_by_rest_id"),
    "getHomeLatestTimeline": PackagedMethod("get_tweet_api", "get_home_latest_timeline"),
    "getUserTweets": PackagedMethod("get_tweet_api", "get_user_tweets"),
    "getTweetDetail": PackagedMethod("get_tweet_api", "get_tweet_detail"),
    "getFollowing": PackagedMethod("get_user_list_api", "get_following"),
    "postCreateFriendships": PackagedMethod("get_v11_post_api", "post_create_friendships"),
    "postDestroyFriendships": PackagedMethod("get_v11_post_api", "post_destroy_friendships"),
    "postCreateRetweet": PackagedMethod("get_post_api", "post_create_retweet"),
    "postDeleteRetweet": PackagedMethod("get_post_api", "post_delete_retweet"),
}


def register_method(name: str, accessor: str, operation: str) -> None:
    PACKAGED_METHODS[name] = PackagedMethod(accessor, operation)


def get_packaged_method(name: str) -> PackagedMethod:
    """Look up a packaged method.

    Raises:
        UnsupportedMethodError: If the name is not registered.
    """
    method = PACKAGED_METHODS.get(name)
    if method is None:
        raise UnsupportedMethodError(name)
    return method


def to_keyword_arguments(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Convert camelCase parameter names to the library's snake_case keywords."""
    return {_CAMEL_BOUNDARY.sub("_", key).lower(): value for key, value in (params or {}).items()}
