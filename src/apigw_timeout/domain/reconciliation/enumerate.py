"""Walk a REST API's resource tree and emit one ref per method."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from apigw_timeout.domain.types import IntegrationRef

if TYPE_CHECKING:
    from collections.abc import Iterator

    from apigw_timeout.domain.ports import ResourceTreeReader

log = getLogger(__name__)


@dataclass(slots=True)
class IntegrationEnumerator:
    resources: ResourceTreeReader

    def enumerate(self, gateway_id: str) -> Iterator[IntegrationRef]:
        """Yield a ref for every declared method under ``gateway_id``.

        This reads live remote state in a single pass. Emission order follows
        the listing and is only meaningful for log readability.
        """

        nodes = list(self.resources.get_resource_tree(gateway_id))
        log.debug("REST API %s has %d resources", gateway_id, len(nodes))
        for node in nodes:
            for http_method in sorted(node.methods):
                detail = self.resources.get_method_detail(gateway_id, node.id, http_method)
                yield IntegrationRef(
                    resource_id=node.id,
                    http_method=http_method,
                    has_integration=detail.has_integration,
                    path=node.path,
                    integration_type=detail.integration_type,
                )
