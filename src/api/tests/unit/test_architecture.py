"""Architecture tests using pytest-archon.

These tests enforce DDD architectural boundaries between the layers of
the IAM bounded context and the shared kernel.
"""

from pytest_archon import archrule


class TestIAMDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_outer_layers(self):
        """Domain layer should only depend on itself.

        Policy evaluation and session trust are pure logic and must stay
        usable without services, adapters or the web framework.
        """
        (
            archrule("domain_no_outer_layers")
            .match("iam.domain*")
            .should_not_import(
                "iam.application*",
                "iam.infrastructure*",
                "iam.dependencies*",
                "iam.presentation*",
                "iam.ports*",
            )
            .check("iam")
        )

    def test_domain_does_not_import_frameworks(self):
        (
            archrule("domain_no_frameworks")
            .match("iam.domain*")
            .should_not_import(
                "fastapi*", "starlette*", "supertokens_python*", "grpc*"
            )
            .check("iam")
        )


class TestIAMPortsLayerBoundaries:
    """Tests that the ports layer has no forbidden dependencies."""

    def test_ports_does_not_import_infrastructure(self):
        """Ports define provider protocols, not their adapters."""
        (
            archrule("ports_no_infrastructure")
            .match("iam.ports*")
            .should_not_import("iam.infrastructure*", "supertokens_python*", "grpc*")
            .check("iam")
        )


class TestIAMApplicationLayerBoundaries:
    """Tests that the application layer has no forbidden dependencies."""

    def test_application_does_not_import_infrastructure(self):
        """Application services should only depend on ports.

        The identity and resource backends are reached through the
        provider protocols; concrete adapters are wired in by the
        dependencies package.
        """
        (
            archrule("application_no_infrastructure")
            .match("iam.application*")
            .should_not_import("iam.infrastructure*", "iam.dependencies*")
            .check("iam")
        )

    def test_application_does_not_import_backend_sdks(self):
        (
            archrule("application_no_backend_sdks")
            .match("iam.application*")
            .should_not_import("supertokens_python*", "grpc*")
            .check("iam")
        )

    def test_application_does_not_import_fastapi(self):
        (
            archrule("application_no_fastapi")
            .match("iam.application*")
            .should_not_import("fastapi*", "starlette*")
            .check("iam")
        )


class TestSharedKernelBoundaries:
    """Tests that the shared kernel stays independent of bounded contexts."""

    def test_shared_kernel_does_not_import_iam(self):
        (
            archrule("shared_kernel_no_iam")
            .match("shared_kernel*")
            .should_not_import("iam*")
            .check("shared_kernel")
        )
