"""
HTTP client for TF-Serving model inference.

Wire format (TF-Serving REST "row" format):
    POST <endpoint>   {"instances": [{...}, {...}, ...]}
    200 OK            {"predictions": [[0.81], [0.42], ...]}

There must be exactly one prediction per instance, in request order. Any other
shape is a hard failure: no partial scores are returned and nothing is
defaulted. Calls are not retried.

The client holds a pooled requests.Session, which is shared by every request
thread of the service.
"""

import logging
import math
import numbers
import time
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter

from .config import InferenceConfig
from .errors import InferenceResponseError

logger = logging.getLogger(__name__)


def parse_predictions(body: Any, expected: int) -> List[float]:
    """
    Extract one score per instance from a TF-Serving response body.

    Args:
        body: Decoded JSON response
        expected: Number of instances that were sent

    Returns:
        Scores in request order

    Raises:
        InferenceResponseError: If the body is not {"predictions": [[score], ...]}
            with exactly `expected` entries
    """
    if not isinstance(body, dict) or "predictions" not in body:
        raise InferenceResponseError("Response has no 'predictions' field")

    predictions = body["predictions"]
    if not isinstance(predictions, list):
        raise InferenceResponseError(
            f"'predictions' must be a list, got {type(predictions).__name__}"
        )
    if len(predictions) != expected:
        raise InferenceResponseError(
            f"Expected {expected} predictions, got {len(predictions)}"
        )

    scores = []
    for i, prediction in enumerate(predictions):
        if not isinstance(prediction, list) or not prediction:
            raise InferenceResponseError(
                f"Prediction {i} must be a non-empty list, got {prediction!r}"
            )
        value = prediction[0]
        if (
            isinstance(value, bool)
            or not isinstance(value, numbers.Real)
            or not math.isfinite(value)
        ):
            raise InferenceResponseError(f"Prediction {i} is not a number: {value!r}")
        scores.append(float(value))

    return scores


class TFServingClient:
    """
    Batched scoring client for TF-Serving predict endpoints.

    Example:
        client = TFServingClient()
        scores = client.predict(
            "http://localhost:8501/v1/models/recmodel:predict",
            [{"userId": 1, "movieId": 10}, {"userId": 1, "movieId": 20}],
        )
    """

    def __init__(
        self,
        timeout_seconds: Optional[float] = 30.0,
        max_connections: int = 50,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            timeout_seconds: Per-call timeout (None waits indefinitely)
            max_connections: Pooled connections per endpoint host
            session: Pre-configured session (a pooled one is created if None)
        """
        self.timeout_seconds = timeout_seconds

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=max_connections,
                pool_maxsize=max_connections,
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    @classmethod
    def from_config(cls, config: InferenceConfig) -> "TFServingClient":
        return cls(
            timeout_seconds=config.timeout_seconds,
            max_connections=config.max_connections,
        )

    def predict(self, endpoint_url: str, instances: List[Dict[str, Any]]) -> List[float]:
        """
        Score a batch of instances with one POST.

        Args:
            endpoint_url: TF-Serving predict URL
            instances: One JSON object per candidate

        Returns:
            One score per instance, in instance order

        Raises:
            requests.RequestException: On connection errors, timeouts and
                non-2xx responses
            InferenceResponseError: If the body is not valid JSON or has the
                wrong shape
        """
        start_time = time.time()

        try:
            response = self.session.post(
                endpoint_url,
                json={"instances": instances},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Inference request to {endpoint_url} failed: {e}")
            raise

        try:
            body = response.json()
        except ValueError as e:
            raise InferenceResponseError(f"Response from {endpoint_url} is not JSON: {e}")

        scores = parse_predictions(body, len(instances))

        latency_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Scored {len(instances)} instances at {endpoint_url} in {latency_ms:.1f}ms"
        )
        return scores

    def close(self) -> None:
        """Close pooled connections."""
        self.session.close()
