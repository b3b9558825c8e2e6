"""Release pipeline services.

Services implement the build stages, coordinating between the domain layer
(core/) and infrastructure (platform/).
"""

from ftrelease.services.orchestrator import ReleaseOrchestrator, ReleaseReport
from ftrelease.services.pipeline import FlavorPipeline, FlavorReport
from ftrelease.services.release_errors import PipelineFailure, ReleaseError, Stage

__all__ = [
    "FlavorPipeline",
    "FlavorReport",
    "PipelineFailure",
    "ReleaseError",
    "ReleaseOrchestrator",
    "ReleaseReport",
    "Stage",
]
