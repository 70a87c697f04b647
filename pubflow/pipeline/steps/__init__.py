"""Concrete publication steps, in pipeline order."""

from pubflow.pipeline.steps.retrieve_resources import RetrieveResourcesStep
from pubflow.pipeline.steps.validate_document import ValidateDocumentStep
from pubflow.pipeline.steps.check_authorization import CheckAuthorizationStep
from pubflow.pipeline.steps.check_third_party_resources import CheckThirdPartyResourcesStep
from pubflow.pipeline.steps.publish import PublishStep
from pubflow.pipeline.steps.install_document import InstallDocumentStep
from pubflow.pipeline.steps.update_shortlink import UpdateShortlinkStep

__all__ = [
    "RetrieveResourcesStep",
    "ValidateDocumentStep",
    "CheckAuthorizationStep",
    "CheckThirdPartyResourcesStep",
    "PublishStep",
    "InstallDocumentStep",
    "UpdateShortlinkStep",
]
