from __future__ import annotations

from apigw_timeout.domain.reconciliation.enumerate import IntegrationEnumerator
from apigw_timeout.domain.types import IntegrationRef
from tests.support.gateway import FakeGatewayService, FakeMethod, FakeResource, make_resource


def test_enumerate_yields_one_ref_per_declared_method() -> None:
    gateway = FakeGatewayService(
        resources={
            "api": [
                make_resource("root", "/"),
                make_resource("users", "/users", "GET", "POST"),
                FakeResource(
                    id="user",
                    path="/users/{id}",
                    methods={
                        "GET": FakeMethod("AWS_PROXY"),
                        "OPTIONS": FakeMethod(None),
                        "DELETE": FakeMethod("HTTP_PROXY"),
                    },
                ),
            ]
        }
    )

    refs = list(IntegrationEnumerator(gateway).enumerate("api"))

    assert len(refs) == 5
    with_integration = [ref for ref in refs if ref.has_integration]
    without_integration = [ref for ref in refs if not ref.has_integration]
    assert len(with_integration) == 4
    assert without_integration == [
        IntegrationRef(
            resource_id="user",
            http_method="OPTIONS",
            has_integration=False,
            path="/users/{id}",
            integration_type=None,
        )
    ]
    assert {ref.integration_type for ref in with_integration} == {"AWS_PROXY", "HTTP_PROXY"}


def test_enumerate_fetches_method_detail_for_each_method() -> None:
    gateway = FakeGatewayService(resources={"api": [make_resource("users", "/users", "GET")]})

    list(IntegrationEnumerator(gateway).enumerate("api"))

    assert gateway.calls == [
        ("get_resource_tree", "api"),
        ("get_method_detail", "api", "users", "GET"),
    ]


def test_enumerate_empty_tree_yields_nothing() -> None:
    gateway = FakeGatewayService(resources={})

    assert list(IntegrationEnumerator(gateway).enumerate("api")) == []
