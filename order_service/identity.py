# order_service/identity.py

import logging

import requests

logger = logging.getLogger(__name__)


class IdentityClient:
    """
    Existence check against the user service.

    A missing user and an unreachable user service are deliberately the same
    answer here: anything other than a 2xx within the timeout is "no".
    """

    def __init__(self, base_url: str, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def exists(self, user_id: int, authorization: str) -> bool:
        url = f"{self.base_url}/api/users/{user_id}"
        try:
            response = requests.get(
                url,
                headers={"Authorization": authorization},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Identity check for user {user_id} failed: {e}")
            return False
        if not 200 <= response.status_code < 300:
            logger.warning(f"Identity check for user {user_id} returned {response.status_code}")
            return False
        return True
