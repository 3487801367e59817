"""
Decoded daemon responses

Request payloads (container config, host config, commit config) stay plain
dicts; only the small responses the client interprets are typed here.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .exceptions import Malformed


def _require(data: Any, key: str, what: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise Malformed(f"{what} response has no '{key}': {data!r}")
    return data[key]


@dataclass
class ContainerCreateResponse:
    id: str
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContainerCreateResponse':
        return cls(
            id=_require(data, 'Id', 'Container create'),
            warnings=data.get('Warnings') or []
        )


@dataclass
class ContainerWaitResponse:
    status_code: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContainerWaitResponse':
        status_code = _require(data, 'StatusCode', 'Container wait')
        try:
            return cls(status_code=int(status_code))
        except (TypeError, ValueError) as e:
            raise Malformed(f"Container wait response has invalid StatusCode: {status_code!r}") from e


@dataclass
class CommitResponse:
    id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommitResponse':
        return cls(id=_require(data, 'Id', 'Commit'))
