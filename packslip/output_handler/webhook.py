"""
Webhook Forwarder Module.

Posts finalized pack slips to a downstream workflow engine. Timeouts,
network errors and 5xx responses are retried with exponential backoff;
4xx responses fail immediately.
"""

import time
from typing import Any, Callable, Dict, Optional

import httpx

from config import get_config
from packslip.utils.logger import get_logger
from packslip.utils.retry import with_retry
from packslip.utils.exceptions import WebhookDeliveryError

# Initialize module logger
logger = get_logger(__name__)


def is_transient(error: Exception) -> bool:
    """True for errors worth retrying."""
    if isinstance(error, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return False


class WebhookForwarder:
    """
    Sends JSON payloads to the configured webhook URL.
    
    Attributes:
        url: Webhook URL; when empty, send() is a no-op
        timeout: Request timeout in seconds
        retries: Retries after the first attempt
        
    Example:
        >>> forwarder = WebhookForwarder(url="https://example.com/hook")
        >>> forwarder.send({"id": "abc", "lineItems": []})
        {'delivered': True, 'status_code': 200}
    """
    
    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep
    ) -> None:
        self.url = url if url is not None else get_config("webhook.url", "")
        self.timeout = timeout if timeout is not None else get_config("webhook.timeout", 10)
        self.retries = retries if retries is not None else get_config("webhook.retries", 2)
        self.min_delay = get_config("webhook.min_delay", 0.2)
        self.factor = get_config("webhook.factor", 2)
        self.max_delay = get_config("webhook.max_delay", 3.0)
        self._client = client
        self._sleep = sleep
    
    @property
    def enabled(self) -> bool:
        return bool(self.url)
    
    def _post(self, client: httpx.Client, payload: Dict[str, Any]) -> httpx.Response:
        response = client.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response
    
    def send(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deliver a payload.
        
        Args:
            payload: JSON-serializable body.
            
        Returns:
            {"skipped": True, ...} when no URL is configured, otherwise
            {"delivered": True, "status_code": ...}.
            
        Raises:
            WebhookDeliveryError: If delivery fails after retries.
        """
        if not self.enabled:
            logger.info("Webhook URL not configured, skipping delivery")
            return {"skipped": True, "reason": "webhook URL not configured"}
        
        client = self._client or httpx.Client()
        try:
            response = with_retry(
                lambda: self._post(client, payload),
                retries=self.retries,
                min_delay=self.min_delay,
                factor=self.factor,
                max_delay=self.max_delay,
                should_retry=is_transient,
                sleep=self._sleep
            )
        except httpx.HTTPStatusError as e:
            logger.error(f"Webhook rejected payload: HTTP {e.response.status_code}")
            raise WebhookDeliveryError(self.url, str(e), e.response.status_code)
        except httpx.HTTPError as e:
            logger.error(f"Webhook delivery failed: {e}")
            raise WebhookDeliveryError(self.url, str(e))
        finally:
            if self._client is None:
                client.close()
        
        logger.info(f"Webhook delivered (HTTP {response.status_code})")
        return {"delivered": True, "status_code": response.status_code}
