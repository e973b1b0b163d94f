class DeploymentError(Exception):
    """Base class for failures of a single contract deployment."""

    kind = "deployment"


class ResolutionError(DeploymentError):
    """Raised when a contract name cannot be resolved to a deployable artifact."""

    kind = "resolution"


class SubmissionError(DeploymentError):
    """Raised when the deployment transaction could not be built, signed or broadcast."""

    kind = "submission"


class ConfirmationError(DeploymentError):
    """Raised when a broadcast deployment is not confirmed, or is confirmed with a revert."""

    kind = "confirmation"


class VerificationError(DeploymentError):
    """Raised when a confirmed contract could not be published to a block explorer."""

    kind = "verification"


class DeploymentConfigError(ValueError):
    pass


class RegistryError(DeploymentError):
    """Raised when a confirmed deployment could not be recorded in a registry file."""

    kind = "registry"
