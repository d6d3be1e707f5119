"""
Generation services.

Stages of the video pipeline and the collaborators they are wired to:
- JobSubmitter, PollLoop, ArtifactFetcher, ArtifactPublisher: pipeline stages
- GenerationPipeline: the state machine driving them
- VideoLedgerService: PostgreSQL status ledger
- MinIOArtifactStore / LocalArtifactStore: artifact storage
- OpenAIVideoProvider: OpenAI Videos API adapter
"""

from .fetcher import ArtifactFetcher
from .pipeline import GenerationPipeline, Phase
from .poller import PollLoop, extract_artifact_url
from .publisher import ArtifactPublisher, artifact_path
from .submitter import JobSubmitter, SubmissionParameters

__all__ = [
    "ArtifactFetcher",
    "ArtifactPublisher",
    "GenerationPipeline",
    "JobSubmitter",
    "Phase",
    "PollLoop",
    "SubmissionParameters",
    "artifact_path",
    "extract_artifact_url",
]
