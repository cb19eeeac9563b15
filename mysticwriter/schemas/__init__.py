# Analytics ledger and summary
from .analytics import (
    DailyActivityRecord,
    AnalyticsSummary,
    StorySegment,
    ContributionRequest,
    ContributionResponse,
    TrackWordsRequest,
)

# Avatar pipeline
from .avatar import (
    AvatarResult,
    GeneratedImage,
    AvatarRequest,
    CharacterAvatarRequest,
    Character,
)

# Writing helpers
from .writing import (
    GenerationOptions,
    ContinueStoryRequest,
    ContinueStoryResponse,
    CharacterDescriptionRequest,
    CharacterDescriptionResponse,
    RandomCharacterRequest,
    RandomCharacter,
    TitlesRequest,
    TitlesResponse,
    ToneRequest,
    ToneAnalysis,
)

from .result import Result

__all__ = [
    # Analytics
    "DailyActivityRecord",
    "AnalyticsSummary",
    "StorySegment",
    "ContributionRequest",
    "ContributionResponse",
    "TrackWordsRequest",
    # Avatar
    "AvatarResult",
    "GeneratedImage",
    "AvatarRequest",
    "CharacterAvatarRequest",
    "Character",
    # Writing
    "GenerationOptions",
    "ContinueStoryRequest",
    "ContinueStoryResponse",
    "CharacterDescriptionRequest",
    "CharacterDescriptionResponse",
    "RandomCharacterRequest",
    "RandomCharacter",
    "TitlesRequest",
    "TitlesResponse",
    "ToneRequest",
    "ToneAnalysis",
    # Boundary
    "Result",
]
