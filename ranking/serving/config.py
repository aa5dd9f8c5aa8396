"""
Configuration for remote model inference.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_NEURALCF_ENDPOINT = "http://localhost:8501/v1/models/recmodel:predict"
DEFAULT_DIN_ENDPOINT = "http://localhost:8501/v1/models/dinmodel:predict"


@dataclass
class InferenceConfig:
    """
    Remote inference settings.

    Attributes:
        neuralcf_endpoint: TF-Serving predict URL of the NeuralCF model
        din_endpoint: TF-Serving predict URL of the DIN model
        timeout_seconds: Per-call HTTP timeout (None waits indefinitely)
        max_connections: Connection pool size shared by all request threads
    """

    neuralcf_endpoint: str = DEFAULT_NEURALCF_ENDPOINT
    din_endpoint: str = DEFAULT_DIN_ENDPOINT
    timeout_seconds: Optional[float] = 30.0
    max_connections: int = 50

    def __post_init__(self):
        """Validate configuration."""
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.max_connections < 1:
            raise ValueError(f"max_connections must be >= 1, got {self.max_connections}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "neuralcf_endpoint": self.neuralcf_endpoint,
            "din_endpoint": self.din_endpoint,
            "timeout_seconds": self.timeout_seconds,
            "max_connections": self.max_connections,
        }
