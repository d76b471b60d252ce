"""Apply a resolved timeout to a single integration."""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from apigw_timeout.domain.ports import RemoteCallError
from apigw_timeout.domain.types import (
    Applied,
    FailedOther,
    FailedQuotaExceeded,
    SkippedNoIntegration,
    SkippedUnsupportedType,
)

if TYPE_CHECKING:
    from collections.abc import Collection

    from apigw_timeout.domain.ports import IntegrationWriter
    from apigw_timeout.domain.types import IntegrationRef, PatchOutcome, ResolvedTimeout

log = getLogger(__name__)

# e.g. "Timeout should be between 50 ms and 29000 ms"
_QUOTA_PATTERN: Final = re.compile(r"between\s+50\s*ms\s+and\s+(\d+)\s*ms", re.IGNORECASE)


def parse_account_max(message: str) -> int | None:
    """Extract the account ceiling from a timeout validation message."""

    match = _QUOTA_PATTERN.search(message)
    if match is None:
        return None
    return int(match.group(1))


@dataclass(slots=True)
class IntegrationPatcher:
    writer: IntegrationWriter
    gateway_id: str
    integration_types: Collection[str] | None = None

    def apply(self, ref: IntegrationRef, timeout: ResolvedTimeout) -> PatchOutcome:
        if not ref.has_integration:
            return SkippedNoIntegration(ref)
        allowed = self.integration_types
        if allowed is not None and ref.integration_type not in allowed:
            return SkippedUnsupportedType(ref, ref.integration_type)

        try:
            self.writer.patch_integration_timeout(
                self.gateway_id, ref.resource_id, ref.http_method, timeout.millis
            )
        except RemoteCallError as exc:
            account_max = parse_account_max(exc.message)
            if account_max is not None:
                log.debug("Service quota rejected %s ms for %s", timeout.millis, ref)
                return FailedQuotaExceeded(ref, account_max)
            return FailedOther(ref, exc.message)
        return Applied(ref, timeout.millis)
