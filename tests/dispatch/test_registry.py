from unittest.mock import MagicMock

import pytest
from twitter_proxy.dispatch.registry import (
    PACKAGED_METHODS,
    PackagedMethod,
    get_packaged_method,
    register_method,
    to_keyword_arguments,
)
from twitter_proxy.exceptions import UnsupportedMethodError

EXPECTED_METHODS = {
    "getUserByScreenName": ("get_user_api", "get_user_by_screen_name"),
    "getUserByRestId": ("get_user_api", "get_user_by_rest_id"),
    "getHomeLatestTimeline": ("get_tweet_api", "get_home_latest_timeline"),
    "getUserTweets": ("get_tweet_api", "get_user_tweets"),
    "getTweetDetail": ("get_tweet_api", "get_tweet_detail"),
    "getFollowing": ("get_user_list_api", "get_following"),
    "postCreateFriendships": ("get_v11_post_api", "post_create_friendships"),
    "postDestroyFriendships": ("get_v11_post_api", "post_destroy_friendships"),
    "postCreateRetweet": ("get_post_api", "post_create_retweet"),
    "postDeleteRetweet": ("get_post_api", "post_delete_retweet"),
}


@pytest.mark.parametrize("name, target", sorted(EXPECTED_METHODS.items()))
def test_registered_methods_resolve(name, target):
    accessor, operation = target
    client = MagicMock()

    bound = get_packaged_method(name).resolve(client)

    getattr(client, accessor).assert_called_once_with()
    assert bound is getattr(getattr(client, accessor).return_value, operation)


@pytest.mark.parametrize("name", ["deleteAccount", "", "getuserbyscreenname"])
def test_unsupported_method(name):
    with pytest.raises(UnsupportedMethodError) as exc_info:
        get_packaged_method(name)

    assert exc_info.value.method_name == name
    assert exc_info.value.status_code == 400
    assert name in str(exc_info.value)


def test_register_method(monkeypatch):
    monkeypatch.setattr("twitter_proxy.dispatch.registry.PACKAGED_METHODS", dict(PACKAGED_METHODS))

    register_method("getBookmarks", "get_tweet_api", "get_bookmarks")

    assert get_packaged_method("getBookmarks") == PackagedMethod("get_tweet_api", "get_bookmarks")


@pytest.mark.parametrize(
    "params, expected",
    [
        ({"screenName": "jack"}, {"screen_name": "jack"}),
        ({"focalTweetId": "1", "count": 20}, {"focal_tweet_id": "1", "count": 20}),
        ({"user_id": "42"}, {"user_id": "42"}),
        (None, {}),
    ],
)
def test_to_keyword_arguments(params, expected):
    assert to_keyword_arguments(params) == expected
