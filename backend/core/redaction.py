# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Server-side redaction policy.

Every outbound record that carries secrets passes through
``RedactionPolicy.apply`` with the list of its ``SecretField`` descriptors.
Per field, decided at serialisation time:

    NO_SECRET                       -> field and flag omitted
    SECRET_SET, redact_mode=False   -> plaintext kept, has<Field>: true
    SECRET_SET, redact_mode=True    -> plaintext removed, has<Field>: true

The policy only governs API exposure.  Toggling ``redact_mode`` does not
touch what is stored; it changes the next read.
"""

import copy
import enum
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from core.config import settings


class FieldState(enum.Enum):
    NO_SECRET = "no_secret"
    SECRET_SET = "secret_set"


@dataclass(frozen=True)
class SecretField:
    key: str                      # wire name of the secret, e.g. "sshPassword"
    flag: str                     # presence flag, e.g. "hasSshPassword"
    path: Tuple[str, ...] = ()    # nesting inside the record, e.g. ("notifications", "smtp")


@dataclass(frozen=True)
class RedactionPolicy:
    redact_mode: bool = True

    @staticmethod
    def state(value: Any) -> FieldState:
        if value is None or value == "":
            return FieldState.NO_SECRET
        return FieldState.SECRET_SET

    def apply(self, record: Mapping[str, Any], fields: Iterable[SecretField]) -> dict:
        """Return a redacted deep copy of *record*; the input is left untouched."""
        out = copy.deepcopy(dict(record))
        for field in fields:
            container = _walk(out, field.path)
            if container is None:
                continue
            value = container.pop(field.key, None)
            container.pop(field.flag, None)
            if self.state(value) is FieldState.NO_SECRET:
                continue
            if not self.redact_mode:
                container[field.key] = value
            container[field.flag] = True
        return out

    def apply_many(
        self, records: Iterable[Mapping[str, Any]], fields: Sequence[SecretField]
    ) -> List[dict]:
        return [self.apply(r, fields) for r in records]


def _walk(record: dict, path: Tuple[str, ...]):
    node = record
    for part in path:
        node = node.get(part)
        if not isinstance(node, dict):
            return None
    return node


def get_redaction_policy() -> RedactionPolicy:
    """FastAPI dependency: the policy for the running deployment."""
    return RedactionPolicy(redact_mode=settings.redact_mode)
