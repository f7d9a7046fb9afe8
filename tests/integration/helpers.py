"""
Utility helpers shared across the integration test suite.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from fastapi.testclient import TestClient

API = "/api/v1"
UNKNOWN_UUID = "00000000-0000-0000-0000-000000000000"


@dataclass(frozen=True)
class EndpointCase:
    """Declarative representation of an endpoint invocation."""

    method: str
    path: str
    json: Optional[Dict[str, Any]] = None
    params: Optional[Dict[str, Any]] = None

    def label(self) -> str:
        return f"{self.method} {self.path}"


def _exercise_cases(client: TestClient, cases: Iterable[EndpointCase], headers: Optional[Dict[str, str]] = None):
    for case in cases:
        response = client.request(
            case.method,
            f"{API}{case.path}",
            json=case.json,
            params=case.params,
            headers=headers,
        )
        yield case, response


def assert_status_for_cases(
    client: TestClient,
    cases: Iterable[EndpointCase],
    expected_status: int,
    headers: Optional[Dict[str, str]] = None,
) -> None:
    for case, response in _exercise_cases(client, cases, headers):
        assert response.status_code == expected_status, (
            f"{case.label()} returned {response.status_code}, expected {expected_status}: {response.text}"
        )
